"""
Utility functions for CssImageEmbedder.
"""

import os
import sys
from typing import Optional


def format_file_size(size_bytes: int, decimals: int = 1) -> str:
    """
    Format a size in bytes in human-readable form.

    Args:
        size_bytes: The size in bytes
        decimals: Number of decimal places to display

    Returns:
        str: The formatted size, e.g. "1.5 KB"
    """
    units = ["B", "KB", "MB", "GB", "TB"]
    if size_bytes == 0:
        return "0 B"

    size = float(size_bytes)
    unit_index = 0
    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{size_bytes} B"
    return f"{size:.{decimals}f} {units[unit_index]}"


def is_remote_url(source: Optional[str]) -> bool:
    """Check whether an input source is an http(s) URL rather than a path."""
    return bool(source) and source.lower().startswith(("http://", "https://"))


def is_stdin_source(source: Optional[str]) -> bool:
    return not source or source == "-"


def read_stylesheet(source: Optional[str] = None) -> str:
    """
    Read a stylesheet from a file, or from stdin when source is empty or "-".

    Args:
        source: Path to a stylesheet file

    Returns:
        str: The stylesheet text
    """
    if is_stdin_source(source):
        try:
            return sys.stdin.read()
        except OSError as e:
            raise RuntimeError(f"Error reading from stdin: {e}")
    try:
        with open(source, 'r', encoding='utf-8') as f:
            return f.read()
    except OSError as e:
        raise RuntimeError(f"Error reading input file {source}: {e}")


def write_stylesheet(content: str, file_path: Optional[str] = None) -> None:
    """
    Write a stylesheet to a file, or to stdout when no path is given.

    Args:
        content: The stylesheet text
        file_path: Path to the output file
    """
    if file_path:
        try:
            directory = os.path.dirname(os.path.abspath(file_path))
            os.makedirs(directory, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            raise RuntimeError(f"Error writing output file {file_path}: {e}")
    else:
        sys.stdout.write(content)
        sys.stdout.flush()
