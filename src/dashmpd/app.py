#!/usr/bin/python3

import argparse
import pathlib
import sys
import typing

import colorama
import msgspec

from .normalize import NormalizeJob
from .output import CLIMessageHandlers

colorama.just_fix_windows_console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dashmpd",
        description="Decodes MPEG-DASH manifests and writes them back out in normalized form.",
    )

    parser.add_argument(
        "sources",
        type=str,
        nargs="+",
        metavar="SOURCE",
        help="Path or http(s) URL of a manifest",
    )
    parser.add_argument(
        "-o",
        "--output-directory",
        type=pathlib.Path,
        help="Location for normalized manifests (created if nonexistent; "
        "manifests are written to standard output if not provided)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Number of seconds to wait on a remote manifest before giving up",
    )
    parser.add_argument(
        "--progress-style",
        type=str,
        choices=[
            handler.tag
            for handler in msgspec.inspect.multi_type_info(typing.get_args(CLIMessageHandlers))
            if isinstance(handler, msgspec.inspect.StructType)
        ],
        default="text",
        help="Style to use for displaying progress results",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    handler = msgspec.convert({"type": args.progress_style}, CLIMessageHandlers)

    job = msgspec.convert(vars(args), type=NormalizeJob)
    job.handlers.append(handler)
    if not job.run():
        sys.exit(1)


if __name__ == "__main__":
    main()
