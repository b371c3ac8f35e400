"""Command line argument parsing for the player."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Optional, Sequence

from .config import AudioFormat

__all__ = ["CommandLineArguments", "parse_arguments"]

_EMPTY = ""

_BITRATES = {
    "320": AudioFormat.OGG_VORBIS_320,
    "160": AudioFormat.OGG_VORBIS_160,
    "96": AudioFormat.OGG_VORBIS_96,
}


@dataclass
class CommandLineArguments:
    """Options given on the command line."""

    username: str = _EMPTY
    password: str = _EMPTY
    should_show_help: bool = False
    set_bitrate: bool = False
    bitrate: Optional[AudioFormat] = None


def parse_arguments(argv: Optional[Sequence[str]] = None) -> CommandLineArguments:
    """Parse arguments (without the program name); raise ValueError on bad input."""
    args = list(sys.argv[1:] if argv is None else argv)
    result = CommandLineArguments()
    items = iter(args)

    def value_for(flag: str) -> str:
        try:
            return next(items)
        except StopIteration:
            raise ValueError(f"expected path after the {flag} flag") from None

    for arg in items:
        if arg in ("-h", "--help"):
            return CommandLineArguments(should_show_help=True)
        if arg in ("-u", "--username"):
            result.username = value_for("username")
        elif arg in ("-p", "--password"):
            result.password = value_for("password")
        elif arg in ("-b", "--bitrate"):
            rate = value_for("bitrate")
            if rate not in _BITRATES:
                raise ValueError("invalid bitrate argument")
            result.bitrate = _BITRATES[rate]
            result.set_bitrate = True
        else:
            raise ValueError(f"unknown flag '{arg}'")

    if (result.username == "") != (result.password == ""):
        raise ValueError(
            "both username and password must be provided when using username authorization"
        )
    return result