from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _restore_embedder_logger():
    """The CLI replaces handlers and turns off propagation; undo that after each test."""
    log = logging.getLogger("css-image-embedder")
    handlers = log.handlers[:]
    level = log.level
    propagate = log.propagate
    yield
    for handler in log.handlers[:]:
        if handler not in handlers:
            log.removeHandler(handler)
            handler.close()
    log.setLevel(level)
    log.propagate = propagate


@pytest.fixture
def embed_log(caplog):
    caplog.set_level(logging.DEBUG, logger="css-image-embedder")
    return caplog
