"""
Finds url(...) references in stylesheet text and lets a callback rewrite them.
"""

import re
from typing import Callable, Optional

# A string, a comment, or a url() whose argument is double quoted, single
# quoted or bare. Strings and comments are matched first and kept as they are,
# so "/*" inside a string does not open a comment and url() inside a comment
# is skipped.
URL_TOKEN_PATTERN = re.compile(
    r"""
    (?P<string>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')
    |
    (?P<comment>/\*.*?\*/)
    |
    \burl\(\s*
    (?P<arg>
        "(?:[^"\\\n]|\\.)*"
      | '(?:[^'\\\n]|\\.)*'
      | [^)"'\s]*
    )
    \s*\)
    """,
    re.IGNORECASE | re.DOTALL | re.VERBOSE,
)


def rewrite_urls(css: str, callback: Callable[[str], Optional[str]]) -> str:
    """
    Rewrite every url(...) token in a stylesheet.

    Args:
        css: The stylesheet text
        callback: Called once per token with the raw argument text (quotes
                  included). Returns the replacement for the whole token,
                  or a falsy value to leave the token unchanged.

    Returns:
        str: The rewritten stylesheet
    """
    def replace(match: re.Match) -> str:
        if match.group("arg") is None:
            return match.group(0)
        replacement = callback(match.group("arg"))
        return replacement or match.group(0)

    return URL_TOKEN_PATTERN.sub(replace, css)


def find_urls(css: str) -> list:
    """Return the raw argument of every url(...) token, in document order."""
    found = []
    for match in URL_TOKEN_PATTERN.finditer(css):
        if match.group("arg") is not None:
            found.append(match.group("arg"))
    return found
