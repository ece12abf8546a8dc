# SPDX-License-Identifier: BUSL-1.1
"""Shared utilities for boxenter."""

import sys

RED = "31"
GREEN = "32"
YELLOW = "33"


def colorize(text: str, code: str, stream=None) -> str:
    """Wrap text in an ANSI color sequence when the stream is a terminal."""
    stream = stream or sys.stderr
    isatty = getattr(stream, "isatty", None)
    if isatty is None or not isatty():
        return text
    return f"\x1b[{code}m{text}\x1b[0m"


def die(msg: str, code: int = 1):
    """Print error message and exit."""
    print(colorize(f"Error: {msg}", RED), file=sys.stderr)
    sys.exit(code)


def warn(msg: str):
    print(colorize(f"Warning: {msg}", YELLOW), file=sys.stderr)


def confirm(prompt: str, default: bool = False) -> bool:
    """Ask a yes/no question. Returns True for yes."""
    suffix = "[Y/n]" if default else "[y/N]"
    answer = input(f"{prompt} {suffix}: ").strip().lower()
    if not answer:
        return default
    return answer in ("y", "yes")


def parse_bool(value, default: bool = False) -> bool:
    """Interpret a config or environment value as a boolean."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if not text:
        return default
    return text in ("1", "true", "yes", "y", "on")
