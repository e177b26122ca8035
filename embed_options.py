"""
Embedding options for CssImageEmbedder.
"""

import re
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Pattern, Tuple, Union


class Action(Enum):
    """What to do when a problem is detected."""
    IGNORE = "ignore"  # Fall back silently
    WARN = "warn"      # Log (up to max_reported) and fall back
    ERROR = "error"    # Log and fail the whole run at the end

    @classmethod
    def parse(cls, value: Union["Action", str, None]) -> "Action":
        """
        Coerce a user supplied value into an Action.

        Args:
            value: An Action, or one of "ignore", "warn", "error" (any case).
                   An empty string or None means ignore.

        Returns:
            Action: The matching action
        """
        if isinstance(value, cls):
            return value
        name = (value or "").strip().lower()
        if name in ("", "ignore"):
            return cls.IGNORE
        if name == "warn":
            return cls.WARN
        if name == "error":
            return cls.ERROR
        raise ValueError(f"Unknown action: {value!r} (expected ignore, warn or error)")


class ProblemKind(Enum):
    """A problem found while embedding a URL, with its log phrase and option name."""
    MISSING_FILE = ("is missing", "act_on_missing_file")
    LARGE_FILE = ("is too large", "act_on_large_file")
    ENCODED_TWICE = ("is encoded more than once", "act_on_encoded_twice")

    def __init__(self, phrase: str, option_name: str):
        self.phrase = phrase
        self.option_name = option_name


PatternLike = Union[str, Pattern[str]]

# camelCase names accepted for callers used to the original option names
OPTION_ALIASES = {
    "maxImageSize": "max_image_size",
    "maxReported": "max_reported",
    "actOnMissingFile": "act_on_missing_file",
    "actOnLargeFile": "act_on_large_file",
    "actOnEncodedTwice": "act_on_encoded_twice",
    "originalAsComment": "original_as_comment",
}


def compile_patterns(patterns: Optional[Iterable[PatternLike]]) -> Tuple[Pattern[str], ...]:
    """Compile strings to regular expressions, keeping order and dropping repeats."""
    if patterns is None:
        return ()
    if isinstance(patterns, (str, re.Pattern)):
        patterns = [patterns]
    compiled = []
    for pattern in patterns:
        if not isinstance(pattern, re.Pattern):
            pattern = re.compile(pattern)
        if pattern not in compiled:
            compiled.append(pattern)
    return tuple(compiled)


@dataclass(frozen=True)
class EmbedOptions:
    """Holds the options for one embedding run."""
    include: Tuple[Pattern[str], ...] = ()
    exclude: Tuple[Pattern[str], ...] = field(default_factory=lambda: (re.compile(".*"),))
    max_image_size: int = 8192  # Encoded data URI length must be strictly below this
    max_reported: int = 10      # Maximum number of warnings written to the log
    act_on_missing_file: Action = Action.ERROR
    act_on_large_file: Action = Action.WARN
    act_on_encoded_twice: Action = Action.WARN
    original_as_comment: bool = False

    def __post_init__(self):
        # Normalize in place; the instance is frozen so go through object.__setattr__
        object.__setattr__(self, "include", compile_patterns(self.include))
        object.__setattr__(self, "exclude", compile_patterns(self.exclude))
        for kind in ProblemKind:
            object.__setattr__(self, kind.option_name, Action.parse(getattr(self, kind.option_name)))
        if self.max_image_size < 0:
            raise ValueError("max_image_size must not be negative")
        if self.max_reported < 0:
            raise ValueError("max_reported must not be negative")

    def action_for(self, kind: ProblemKind) -> Action:
        """Return the configured action for a problem kind."""
        return getattr(self, kind.option_name)

    @classmethod
    def from_overrides(cls, overrides: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "EmbedOptions":
        """
        Build options by merging caller overrides onto the defaults.

        Args:
            overrides: Mapping of option names to values (snake_case or camelCase)
            **kwargs: More overrides, applied after the mapping

        Returns:
            EmbedOptions: The merged, validated options
        """
        merged: Dict[str, Any] = {}
        known = {f.name for f in fields(cls)}
        for name, value in list((overrides or {}).items()) + list(kwargs.items()):
            name = OPTION_ALIASES.get(name, name)
            if name not in known:
                raise TypeError(f"Unknown embedding option: {name}")
            merged[name] = value
        return replace(cls(), **merged)
