#!/usr/bin/env python3
"""
CSS Image Embedder - Embeds files referenced by url(...) in a stylesheet as base64 data URIs.
"""

import argparse
import logging
import os
import re
import shutil
import sys
from dataclasses import dataclass, field
from typing import List, Optional

from embed_options import Action, EmbedOptions
from http_client import create_http_client
from url_embedder import EmbedError, embed_stylesheet
from utils import format_file_size, is_remote_url, is_stdin_source, read_stylesheet, write_stylesheet

__version__ = "1.0.0"

# Set up logging early so option errors are reported in the same format.
logging.basicConfig(format='%(levelname)s: %(message)s', stream=sys.stderr)
logger = logging.getLogger('css-image-embedder')
logger.setLevel(logging.INFO)

ACTION_CHOICES = [action.value for action in Action]


@dataclass
class CommandLineOptions:
    """Holds the parsed command line options."""
    debug: bool = False
    verbose: bool = False
    quiet: bool = False
    backup: bool = False
    overwrite: bool = False
    input_source: Optional[str] = None  # File path, http(s) URL, or None for stdin
    output_file: Optional[str] = None
    log_file: Optional[str] = None
    base_path: str = ""
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    max_image_size: int = 8192
    max_reported: int = 10
    on_missing: str = "error"
    on_large: str = "warn"
    on_duplicate: str = "warn"
    original_as_comment: bool = False

    def embed_options(self) -> EmbedOptions:
        """Build the embedding options, keeping the default exclude unless one was given."""
        overrides = {
            "include": self.include,
            "max_image_size": self.max_image_size,
            "max_reported": self.max_reported,
            "act_on_missing_file": self.on_missing,
            "act_on_large_file": self.on_large,
            "act_on_encoded_twice": self.on_duplicate,
            "original_as_comment": self.original_as_comment,
        }
        if self.exclude:
            overrides["exclude"] = self.exclude
        return EmbedOptions.from_overrides(overrides)


def configure_logging(options: CommandLineOptions):
    """Configure logging based on command line options."""
    # Base logger passes everything; handlers filter by their own levels
    logger.setLevel(logging.DEBUG)

    # Clear existing handlers to avoid duplication
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    if options.log_file:
        try:
            file_handler = logging.FileHandler(options.log_file, 'w', encoding='utf-8')
        except OSError as e:
            # Logging is not set up yet
            print(f"Failed to create log file '{options.log_file}': {e}", file=sys.stderr)
        else:
            file_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)-8s: %(message)s'))
            file_handler.setLevel(logging.DEBUG if options.debug else logging.INFO)
            logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    if options.quiet:
        console_handler.setLevel(logging.ERROR)
    elif options.debug:
        console_handler.setLevel(logging.DEBUG)
    elif options.verbose:
        console_handler.setLevel(logging.INFO)
    else:
        # Policy warnings are part of the normal output
        console_handler.setLevel(logging.WARNING)
    logger.addHandler(console_handler)

    # Handlers are attached here, so don't let records reach the root logger too
    logger.propagate = False


def parse_arguments(argv: Optional[List[str]] = None) -> CommandLineOptions:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="css-image-embedder",
        description="Embed files referenced by url(...) in a stylesheet as base64 data URIs.",
    )

    parser.add_argument(
        "input", nargs="?",
        help="Stylesheet file or http(s) URL. Reads from stdin if omitted or '-'."
    )
    parser.add_argument(
        "--output-file", "-o", type=str,
        help="Write output to FILE instead of stdout. Incompatible with --backup/--overwrite."
    )
    backup_overwrite_group = parser.add_mutually_exclusive_group()
    backup_overwrite_group.add_argument(
        "--backup", "-b", action="store_true",
        help="Create a backup (.bak) of the original file before overwriting it."
    )
    backup_overwrite_group.add_argument(
        "--overwrite", action="store_true",  # No short option for safety
        help="Overwrite the original input file."
    )

    # Logging
    parser.add_argument(
        "--log-file", "-l", type=str,
        help="Also write log output to FILE"
    )
    verbosity_group = parser.add_mutually_exclusive_group()
    verbosity_group.add_argument(
        "--quiet", "-Q", action="store_true",
        help="Only show errors on stderr."
    )
    verbosity_group.add_argument(
        "--verbose", "-v", action="store_true",
        help="Show each embedded file on stderr."
    )
    verbosity_group.add_argument(
        "--debug", "-d", action="store_true",
        help="Show debug messages on stderr."
    )

    # Embedding options
    parser.add_argument(
        "--path", "-p", type=str, default="",
        help="Base directory for resolving URLs (defaults to the input file's directory, else CWD)"
    )
    parser.add_argument(
        "--include", "-i", action="append", default=[], metavar="REGEX",
        help="Embed URLs matching REGEX, even if excluded. May be repeated."
    )
    parser.add_argument(
        "--exclude", "-x", action="append", default=[], metavar="REGEX",
        help="Do not embed URLs matching REGEX. May be repeated. Default excludes everything."
    )
    parser.add_argument(
        "--max-size", "-m", type=int, default=8192,
        help="Only embed files whose data URI is shorter than this many bytes (default: 8192)"
    )
    parser.add_argument(
        "--max-reported", type=int, default=10,
        help="Maximum number of warnings to log (default: 10)"
    )
    parser.add_argument(
        "--on-missing", choices=ACTION_CHOICES, default="error",
        help="What to do when a file is missing (default: error)"
    )
    parser.add_argument(
        "--on-large", choices=ACTION_CHOICES, default="warn",
        help="What to do when a file is too large (default: warn)"
    )
    parser.add_argument(
        "--on-duplicate", choices=ACTION_CHOICES, default="warn",
        help="What to do when a URL is embedded more than once (default: warn)"
    )
    parser.add_argument(
        "--original-as-comment", "-c", action="store_true",
        help="Keep the original URL as a comment before the data URI"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args(argv)

    source = None if is_stdin_source(args.input) else args.input
    if (args.backup or args.overwrite) and (source is None or is_remote_url(source)):
        parser.error("--backup or --overwrite need a local input file.")
    if args.output_file and (args.backup or args.overwrite):
        parser.error("--backup or --overwrite cannot be used with --output-file (-o).")
    if args.max_size < 0 or args.max_reported < 0:
        parser.error("--max-size and --max-reported must not be negative.")
    for pattern in args.include + args.exclude:
        try:
            re.compile(pattern)
        except re.error as e:
            parser.error(f"invalid pattern {pattern!r}: {e}")

    # --- Base Path Logic ---
    base_path = args.path
    if base_path:
        base_path = os.path.abspath(base_path)
    elif source and not is_remote_url(source):
        base_path = os.path.dirname(os.path.abspath(source))
    else:
        base_path = os.getcwd()

    return CommandLineOptions(
        debug=args.debug,
        verbose=args.verbose,
        quiet=args.quiet,
        backup=args.backup,
        overwrite=args.overwrite,
        input_source=source,
        output_file=args.output_file,
        log_file=args.log_file,
        base_path=base_path,
        include=args.include,
        exclude=args.exclude,
        max_image_size=args.max_size,
        max_reported=args.max_reported,
        on_missing=args.on_missing,
        on_large=args.on_large,
        on_duplicate=args.on_duplicate,
        original_as_comment=args.original_as_comment,
    )


def load_input(options: CommandLineOptions) -> str:
    """Read the stylesheet from a URL, a file or stdin."""
    if is_remote_url(options.input_source):
        logger.debug(f"Remote stylesheet, resolving URLs against {options.base_path}")
        return create_http_client().download_text(options.input_source)
    return read_stylesheet(options.input_source)


def write_output(output: str, options: CommandLineOptions) -> None:
    """Write the rewritten stylesheet where the options say."""
    if options.output_file:
        logger.debug(f"Writing output to file: {options.output_file}")
        write_stylesheet(output, options.output_file)
    elif options.backup:
        backup_file = options.input_source + ".bak"
        logger.debug(f"Creating backup: {backup_file}")
        try:
            shutil.copy2(options.input_source, backup_file)
        except OSError as e:
            raise RuntimeError(f"Failed to create backup {backup_file}: {e}")
        write_stylesheet(output, options.input_source)
    elif options.overwrite:
        logger.debug(f"Overwriting original file: {options.input_source}")
        write_stylesheet(output, options.input_source)
    else:
        logger.debug("Writing output to stdout")
        write_stylesheet(output)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    options = parse_arguments(argv)
    configure_logging(options)

    input_desc = options.input_source or "stdin"
    try:
        embed_options = options.embed_options()
        css = load_input(options)
        logger.info(f"Processing {input_desc} ({format_file_size(len(css))}), base path: {options.base_path}")
        output = embed_stylesheet(css, options.base_path, embed_options)
        write_output(output, options)
    except EmbedError as e:
        logger.error(f"{input_desc} was not written: {e}")
        return 1
    except (OSError, RuntimeError, ValueError) as e:
        logger.error(f"Error processing {input_desc}: {e}")
        if options.debug:
            logger.exception("Stack trace:")
        return 1

    logger.info(f"Done. {input_desc}: {format_file_size(len(css))} -> {format_file_size(len(output))}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
