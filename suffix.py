#!/usr/bin/env python3
"""
LineSuffix

A cross-platform Python filter that appends a fixed string to each line of input.
"""

import argparse
import codecs
import contextlib
import enum
import io
import logging
import os
import sys
import traceback
from dataclasses import dataclass
from typing import IO, Iterable, Iterator, List, Optional, Sequence, Tuple

from tqdm import tqdm

# Define version
__version__ = "1.0.0"
__author__ = "tboy1337"

BUFFER_SIZE = 16384

# Data goes to stdout, so diagnostics stay on stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger("LineSuffix")

LICENSE_NOTICE: Tuple[str, ...] = (
    "suffix appends the specified string to each line of input.",
    f"Copyright (C) 2025 {__author__}",
    "",
    "This program is free software: you can redistribute it and/or modify",
    "it under the terms of the GNU General Public License as published by",
    "the Free Software Foundation, either version 3 of the License, or",
    "(at your option) any later version.",
    "",
    "This program is distributed in the hope that it will be useful,",
    "but WITHOUT ANY WARRANTY; without even the implied warranty of",
    "MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the",
    "GNU General Public License for more details.",
    "",
    "You should have received a copy of the GNU General Public License",
    "along with this program.  If not, see <https://www.gnu.org/licenses/>.",
)


@dataclass(frozen=True)
class Switch:
    """A command line switch and every spelling it accepts."""

    name: str
    aliases: Tuple[str, ...]
    help: str
    takes_value: bool = False
    short_circuit: bool = False
    counted: bool = True
    metavar: Optional[str] = None

    @property
    def canonical(self) -> str:
        return f"--{self.name}"

    def matches(self, token: str) -> bool:
        folded = token.casefold()
        return any(folded == alias.casefold() for alias in self.aliases)


SWITCHES: Tuple[Switch, ...] = (
    Switch(
        "help",
        ("--help", "-h", "/h", "/?"),
        "Show this message and exit",
        short_circuit=True,
    ),
    Switch(
        "copyright",
        ("--copyright", "-c", "/c"),
        "Show the license notice and exit",
        short_circuit=True,
    ),
    Switch(
        "input",
        ("--input", "-i", "/i", "/input"),
        "File to read lines from (default: standard input)",
        takes_value=True,
        metavar="PATH",
    ),
    Switch(
        "output",
        ("--output", "-o", "/o", "/output"),
        "File to write lines to (default: standard output)",
        takes_value=True,
        metavar="PATH",
    ),
    Switch(
        "suffix",
        ("--suffix", "-s", "/s", "/suffix"),
        "Text appended verbatim to each line (required)",
        takes_value=True,
        metavar="TEXT",
    ),
    Switch(
        "trim",
        ("--trim", "-t", "/t", "/trim"),
        "Trim surrounding whitespace from each line and drop empty lines",
    ),
    Switch(
        "verbose",
        ("--verbose", "-v", "/v", "/verbose"),
        "Enable verbose logging",
        counted=False,
    ),
    Switch(
        "progress",
        ("--progress", "-p", "/p", "/progress"),
        "Show a progress bar on standard error",
        counted=False,
    ),
)

# Every counted run switch given once, each value switch followed by its value
MAX_ARGUMENTS = sum(
    2 if switch.takes_value else 1
    for switch in SWITCHES
    if switch.counted and not switch.short_circuit
)
# Diagnostic flags sit outside the limit but may each appear once more
MAX_TOKENS = MAX_ARGUMENTS + sum(1 for switch in SWITCHES if not switch.counted)


class Action(enum.Enum):
    RUN = "run"
    SHOW_HELP = "help"
    SHOW_COPYRIGHT = "copyright"
    INVALID = "invalid"


@dataclass(frozen=True)
class Configuration:
    suffix: str
    input_path: Optional[str] = None
    output_path: Optional[str] = None
    trim: bool = False
    verbose: bool = False
    progress: bool = False


@dataclass(frozen=True)
class Resolution:
    """Outcome of argument resolution; ``config`` is set only for RUN."""

    action: Action
    config: Optional[Configuration] = None
    reason: Optional[str] = None


def build_parser() -> argparse.ArgumentParser:
    """Build the parser that binds canonical switches and renders usage."""
    parser = argparse.ArgumentParser(
        prog="suffix",
        description="Append the specified string to each line of input.",
        epilog=(
            "PATH may be relative or absolute. Input is read from standard input\n"
            "and output written to standard output unless a PATH is given.\n"
            "Switches are case-insensitive."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        prefix_chars="-/",
        add_help=False,
        allow_abbrev=False,
    )
    for switch in SWITCHES:
        if switch.takes_value:
            parser.add_argument(
                *switch.aliases,
                dest=switch.name,
                metavar=switch.metavar,
                default=None,
                help=switch.help,
            )
        else:
            parser.add_argument(
                *switch.aliases,
                dest=switch.name,
                action="store_true",
                help=switch.help,
            )
    return parser


def find_switch(token: str) -> Optional[Switch]:
    for switch in SWITCHES:
        if switch.matches(token):
            return switch
    return None


def count_arguments(argv: Sequence[str]) -> int:
    """Count the tokens that fall under the argument limit."""
    count = 0
    tokens = iter(argv)
    for token in tokens:
        switch = find_switch(token)
        if switch is None:
            count += 1
        elif switch.takes_value:
            count += 1
            if next(tokens, None) is not None:
                count += 1
        elif switch.counted:
            count += 1
    return count


def _canonicalize(argv: Sequence[str]) -> Tuple[List[str], Optional[str]]:
    """
    Rewrite user tokens into ``--name`` / ``--name=value`` form.

    Values are attached with ``=`` so argparse takes them verbatim, even when
    they look like a switch. Returns the canonical tokens and a failure
    reason, if any.
    """
    canonical: List[str] = []
    tokens = iter(argv)
    for token in tokens:
        switch = find_switch(token)
        if switch is None:
            return canonical, f"unrecognized argument: {token!r}"
        if switch.short_circuit:
            canonical.append(switch.canonical)
            break
        if switch.takes_value:
            value = next(tokens, None)
            if value is None:
                return canonical, f"{token} expects a value"
            canonical.append(f"{switch.canonical}={value}")
        else:
            canonical.append(switch.canonical)
    return canonical, None


def resolve_arguments(argv: Sequence[str]) -> Resolution:
    """Resolve the argument vector into an action and, for RUN, a configuration."""
    if not argv or len(argv) > MAX_TOKENS:
        return Resolution(
            Action.INVALID,
            reason=f"expected 1 to {MAX_TOKENS} arguments, got {len(argv)}",
        )
    counted = count_arguments(argv)
    if counted > MAX_ARGUMENTS:
        return Resolution(
            Action.INVALID,
            reason=f"expected at most {MAX_ARGUMENTS} arguments, got {counted}",
        )

    canonical, reason = _canonicalize(argv)
    if reason is not None:
        return Resolution(Action.INVALID, reason=reason)

    args = build_parser().parse_args(canonical)
    if args.help:
        return Resolution(Action.SHOW_HELP)
    if args.copyright:
        return Resolution(Action.SHOW_COPYRIGHT)

    # An explicitly empty suffix counts as no suffix at all
    if not args.suffix:
        return Resolution(Action.INVALID, reason="a non-empty suffix is required")

    paths = {}
    for name in ("input", "output"):
        value: Optional[str] = getattr(args, name)
        if value is not None:
            value = value.strip()
            if not value:
                return Resolution(Action.INVALID, reason=f"empty {name} path")
        paths[name] = value

    return Resolution(
        Action.RUN,
        config=Configuration(
            suffix=args.suffix,
            input_path=paths["input"],
            output_path=paths["output"],
            trim=args.trim,
            verbose=args.verbose,
            progress=args.progress,
        ),
    )


def detect_encoding(head: bytes) -> str:
    """Pick a codec from a byte-order mark, defaulting to UTF-8."""
    # UTF-32 LE starts with the UTF-16 LE mark, so test it first
    if head.startswith((codecs.BOM_UTF32_LE, codecs.BOM_UTF32_BE)):
        return "utf-32"
    if head.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return "utf-16"
    if head.startswith(codecs.BOM_UTF8):
        return "utf-8-sig"
    return "utf-8"


def _read_lines(stream: IO[str]) -> Iterator[str]:
    for line in stream:
        yield line[:-1] if line.endswith("\n") else line


@contextlib.contextmanager
def open_source(path: Optional[str]) -> Iterator[Iterator[str]]:
    """
    Open a lazy, single-pass line reader over a file or standard input.

    The file is opened on entry and closed on exit, whether or not the lines
    were consumed. Universal newlines apply, so ``\\n``, ``\\r\\n`` and ``\\r``
    all end a line; terminators are stripped.
    """
    if path is None:
        logger.debug("Reading from standard input")
        yield _read_lines(sys.stdin)
        return

    with open(path, "rb", buffering=BUFFER_SIZE) as raw:
        encoding = detect_encoding(raw.peek(4)[:4])
        logger.debug("Reading %s as %s", path, encoding)
        with io.TextIOWrapper(raw, encoding=encoding, errors="strict") as stream:
            yield _read_lines(stream)


def normalize_line(line: str, trim: bool) -> Optional[str]:
    """Trim a line when requested; ``None`` means the line is dropped."""
    if not trim:
        return line
    line = line.strip()
    return line or None


def append_suffix(line: str, suffix: str) -> str:
    return line + suffix


def transform_lines(lines: Iterable[str], suffix: str, trim: bool) -> Iterator[str]:
    for line in lines:
        normalized = normalize_line(line, trim)
        if normalized is not None:
            yield append_suffix(normalized, suffix)


def _write_stream(lines: Iterable[str], stream: IO[str]) -> int:
    count = 0
    for line in lines:
        stream.write(line)
        stream.write("\n")
        count += 1
    return count


def write_lines(lines: Iterable[str], path: Optional[str]) -> int:
    """
    Write each line plus the platform line terminator; return the line count.

    A named file is created if missing but not truncated on open: it is cut
    to the written length once every line is out, so a shorter run never
    leaves bytes from an earlier, longer file behind.
    """
    if path is None:
        count = _write_stream(lines, sys.stdout)
        sys.stdout.flush()
        return count

    flags = os.O_WRONLY | os.O_CREAT | getattr(os, "O_BINARY", 0)
    fd = os.open(path, flags, 0o666)
    with open(fd, "w", encoding="utf-8", buffering=BUFFER_SIZE) as stream:
        count = _write_stream(lines, stream)
        stream.flush()
        stream.truncate()
    return count


def run_pipeline(config: Configuration) -> int:
    """Stream source to sink through the transform; return lines written."""
    # The source opens first so a missing input never creates the output file
    with open_source(config.input_path) as lines:
        with tqdm(
            transform_lines(lines, config.suffix, config.trim),
            desc="Appending suffix",
            unit="line",
            file=sys.stderr,
            disable=not config.progress,
        ) as pbar:
            return write_lines(pbar, config.output_path)


def print_usage(file: Optional[IO[str]] = None) -> None:
    build_parser().print_help(file if file is not None else sys.stderr)


def print_copyright(file: Optional[IO[str]] = None) -> None:
    out = file if file is not None else sys.stdout
    for line in LICENSE_NOTICE:
        print(line, file=out)


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    resolution = resolve_arguments(argv)
    if resolution.action is Action.SHOW_COPYRIGHT:
        print_copyright()
        return 1
    config = resolution.config
    if resolution.action is not Action.RUN or config is None:
        if resolution.reason:
            logger.debug("Invalid arguments: %s", resolution.reason)
        print_usage()
        return 1

    if config.verbose:
        logger.setLevel(logging.DEBUG)
    logger.debug("LineSuffix v%s", __version__)
    logger.debug("Input: %s", config.input_path or "<stdin>")
    logger.debug("Output: %s", config.output_path or "<stdout>")
    logger.debug("Suffix: %r", config.suffix)
    logger.debug("Trim: %s", "Yes" if config.trim else "No")

    try:
        count = run_pipeline(config)
    except (OSError, UnicodeError) as e:
        logger.error("I/O failure: %s", str(e))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Traceback: %s", traceback.format_exc())
        return 1

    logger.debug("Wrote %d lines to %s", count, config.output_path or "<stdout>")
    return 0


if __name__ == "__main__":
    sys.exit(main())
