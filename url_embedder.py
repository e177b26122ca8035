"""
Stylesheet URL embedding for CssImageEmbedder.

Each url(...) reference in a stylesheet is checked against the include and
exclude patterns, resolved against a base directory, and replaced with a
base64 data URI. Missing files, oversized files and URLs encoded more than
once are handled according to the configured Action for each.
"""

import logging
import os
import urllib.parse
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from embed_options import Action, EmbedOptions, ProblemKind
from image_processor import DataUriEncoder
from stylesheet_rewriter import find_urls, rewrite_urls
from utils import format_file_size

logger = logging.getLogger("css-image-embedder")


class EmbedError(Exception):
    """Raised at the end of a run in which at least one problem was set to error."""

    def __init__(self, stats: "RunStats"):
        super().__init__("Image embedding failed, see the log for details")
        self.stats = stats


@dataclass
class RunStats:
    """Counters for one embedding run."""
    errors: int = 0
    warnings: int = 0
    reported: int = 0      # Warnings actually written to the log
    wasted_bytes: int = 0  # Total length of cached payloads embedded again
    encoded: int = 0
    encoded_bytes: int = 0


class ResolveStatus(Enum):
    CACHED = "cached"
    ENCODED = "encoded"
    TOO_LARGE = "too_large"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class EncodedResult:
    status: ResolveStatus
    payload: Optional[str] = None


def matches(url: str, options: EmbedOptions) -> bool:
    """
    Decide whether a URL should be embedded.

    Data URIs never match. Otherwise a URL matches when an include pattern
    is found in it, or when no exclude pattern is. With the default options
    (no includes, exclude everything) nothing matches.
    """
    if url.startswith("data:"):
        return False
    return (any(p.search(url) for p in options.include)
            or not any(p.search(url) for p in options.exclude))


def strip_quotes(raw: str) -> str:
    """Remove surrounding whitespace and one pair of matching quotes."""
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1].strip()
    return value


def _ignore(message: str, stats: RunStats, options: EmbedOptions) -> None:
    pass


def _warn(message: str, stats: RunStats, options: EmbedOptions) -> None:
    stats.warnings += 1
    if stats.reported < options.max_reported:
        stats.reported += 1
        logger.warning(message)


def _error(message: str, stats: RunStats, options: EmbedOptions) -> None:
    stats.errors += 1
    logger.error(message)


POLICY_HANDLERS: Dict[Action, Callable[[str, RunStats, EmbedOptions], None]] = {
    Action.IGNORE: _ignore,
    Action.WARN: _warn,
    Action.ERROR: _error,
}


def apply_policy(kind: ProblemKind, action: Action, url: str, fallback: Optional[str],
                 stats: RunStats, options: EmbedOptions) -> Optional[str]:
    """
    Record a problem with a URL and return the value to use in its place.

    Args:
        kind: The problem found
        action: The configured action for that problem
        url: The URL as written in the stylesheet
        fallback: Value returned whatever the action (the cached data URI
                  for duplicates, None otherwise)
        stats: Run counters, updated in place
        options: Run options (for max_reported)

    Returns:
        The fallback value
    """
    if kind is ProblemKind.ENCODED_TWICE and fallback:
        stats.wasted_bytes += len(fallback)
    POLICY_HANDLERS[action](f"Image file {url} {kind.phrase}", stats, options)
    return fallback


class UrlEmbedder:
    """
    Rewrites url(...) arguments of one stylesheet into data URIs.

    An instance is the callback handed to rewrite_urls() and holds all state
    of a single run: the cache and the counters. Call finish() once every
    URL has been seen.
    """

    def __init__(self, base_dir: str, options: Optional[EmbedOptions] = None,
                 encoder: Optional[DataUriEncoder] = None):
        """
        Initialize the UrlEmbedder.

        Args:
            base_dir: Directory relative URLs are resolved against
            options: Embedding options (defaults if None)
            encoder: Encoder used to build data URIs
        """
        self.base_dir = base_dir
        self.options = options or EmbedOptions()
        self.encoder = encoder or DataUriEncoder()
        self.cache: Dict[str, str] = {}
        self.stats = RunStats()

    def resolve_path(self, url: str) -> str:
        """Map a stylesheet URL to an absolute file path under base_dir."""
        return os.path.abspath(os.path.join(self.base_dir, urllib.parse.unquote(url)))

    def resolve(self, url: str) -> EncodedResult:
        """
        Look up a URL in the cache, or encode the file it points to.

        Args:
            url: The URL with quotes and whitespace removed

        Returns:
            EncodedResult: CACHED or ENCODED with the data URI, TOO_LARGE or NOT_FOUND
        """
        if url in self.cache:
            return EncodedResult(ResolveStatus.CACHED, self.cache[url])

        file_path = self.resolve_path(url)
        if not os.path.isfile(file_path):
            logger.debug(f"File not found: {file_path}")
            return EncodedResult(ResolveStatus.NOT_FOUND)

        payload = self.encoder.encode_file(file_path)
        if len(payload) < self.options.max_image_size:
            self.cache[url] = payload
            self.stats.encoded += 1
            self.stats.encoded_bytes += len(payload)
            logger.info(f"Embedding {url}: {format_file_size(len(payload))}")
            return EncodedResult(ResolveStatus.ENCODED, payload)

        logger.debug(f"Encoded {url} is {len(payload)} bytes, limit is {self.options.max_image_size}")
        return EncodedResult(ResolveStatus.TOO_LARGE)

    def embed_url(self, url: str) -> Optional[str]:
        """Return the data URI to use for a URL, or None to keep the URL."""
        if not matches(url, self.options):
            return None

        result = self.resolve(url)
        if result.status is ResolveStatus.ENCODED:
            return result.payload

        if result.status is ResolveStatus.CACHED:
            kind = ProblemKind.ENCODED_TWICE
        elif result.status is ResolveStatus.TOO_LARGE:
            kind = ProblemKind.LARGE_FILE
        else:
            kind = ProblemKind.MISSING_FILE
        return apply_policy(kind, self.options.action_for(kind), url, result.payload,
                            self.stats, self.options)

    def __call__(self, raw: str) -> Optional[str]:
        """
        Rewrite the raw argument of one url(...) token into a full token.

        Returns None for URLs that are not eligible, so the token is kept as written.
        """
        old_value = strip_quotes(raw)
        if not matches(old_value, self.options):
            return None
        new_value = self.embed_url(old_value)

        if not new_value:
            return f'url("{old_value}")'
        elif self.options.original_as_comment:
            return f'/*{old_value}*/ url("{new_value}")'
        else:
            return f'url("{new_value}")'

    def finish(self) -> RunStats:
        """
        Log the run summary and fail if any problem was set to error.

        Returns:
            RunStats: The counters of the run

        Raises:
            EmbedError: If at least one error was recorded
        """
        stats = self.stats
        if stats.errors and stats.warnings:
            logger.error(f"Image embedding finished with {stats.errors} errors and {stats.warnings} warnings")
        elif stats.errors:
            logger.error(f"Image embedding finished with {stats.errors} errors")
        elif stats.warnings:
            logger.warning(f"Image embedding finished with {stats.warnings} warnings")

        if stats.wasted_bytes > 0:
            logger.warning(
                f"Images encoded more than once wasted {stats.wasted_bytes} bytes "
                f"({format_file_size(stats.wasted_bytes)})"
            )

        logger.info(f"Embedded {stats.encoded} files ({format_file_size(stats.encoded_bytes)})")

        if stats.errors:
            raise EmbedError(stats)
        return stats


def embed_stylesheet(css: str, base_dir: str, options: Optional[EmbedOptions] = None,
                     encoder: Optional[DataUriEncoder] = None) -> str:
    """
    Embed the files referenced by a stylesheet as data URIs.

    Args:
        css: The stylesheet text
        base_dir: Directory relative URLs are resolved against
        options: Embedding options (defaults if None)
        encoder: Encoder used to build data URIs

    Returns:
        str: The rewritten stylesheet

    Raises:
        EmbedError: If any problem was set to error; nothing is returned then
    """
    embedder = UrlEmbedder(base_dir, options, encoder)
    logger.debug(f"Found {len(find_urls(css))} url() references, base directory: {base_dir}")
    output = rewrite_urls(css, embedder)
    embedder.finish()
    return output
