"""
CLI entrypoint for textdump package.
"""
import argparse
import re
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Tuple

from . import __version__
from .core import (
    OUT_FORMATS,
    DumpOptions,
    InvalidRootError,
    UsageError,
    log,
    build_pattern_set,
    emit,
    resolve_root,
)


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting with status 2."""

    def error(self, message: str) -> NoReturn:
        if message.endswith("expected one argument"):
            flag = message.split(":", 1)[0].replace("argument ", "", 1)
            message = f"missing value for {flag}"
        raise UsageError(message)


def _build_parser() -> _ArgumentParser:
    p = _ArgumentParser(
        prog="textdump",
        description=(
            "Recursively dump text files to stdout, respecting .gitignore "
            "and custom ignore patterns."
        ),
        add_help=False,
        allow_abbrev=False,
    )
    p.add_argument("-h", "--help", action="store_true", help="Show this help message.")
    p.add_argument(
        "-d",
        "--dir",
        default=None,
        metavar="PATH",
        help="Directory to run in (default: current working directory).",
    )
    p.add_argument(
        "-i",
        "--ignore",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Add pattern to ignore, e.g. -i '*.sh' (repeatable).",
    )
    p.add_argument(
        "-g",
        "--glob",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Only dump files matching this pattern (repeatable).",
    )
    p.add_argument(
        "-f",
        "--filter",
        metavar="REGEX",
        help="Skip content lines matching this regular expression.",
    )
    p.add_argument(
        "-o",
        "--out-fmt",
        default="xml",
        metavar="FORMAT",
        help="Output format: xml or md (default: xml).",
    )
    p.add_argument(
        "--xml-tag",
        default="file",
        metavar="TAG",
        help="Element name for xml output (default: file).",
    )
    p.add_argument("-l", "--list", action="store_true", help="List file paths only.")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging to stderr.")
    return p


def _usage_error(parser: argparse.ArgumentParser, message: str) -> NoReturn:
    print(message, file=sys.stderr)
    parser.print_help(sys.stderr)
    sys.exit(1)


# flags whose value is always the next argument, even when it starts with "-"
_VALUE_FLAGS = {
    "-d": "--dir",
    "--dir": "--dir",
    "-i": "--ignore",
    "--ignore": "--ignore",
    "-g": "--glob",
    "--glob": "--glob",
    "-f": "--filter",
    "--filter": "--filter",
    "-o": "--out-fmt",
    "--out-fmt": "--out-fmt",
    "--xml-tag": "--xml-tag",
}
_SWITCHES = ("-l", "--list", "-v", "--verbose")
_HELP_FLAGS = ("-h", "--help")


def _is_known(arg: str) -> bool:
    if arg in _VALUE_FLAGS or arg in _SWITCHES or arg in _HELP_FLAGS:
        return True
    return arg.startswith("--") and arg.split("=", 1)[0] in _VALUE_FLAGS


def _bind_values(argv: List[str]) -> Tuple[List[str], bool]:
    """Attach each flag's value as ``--flag=VALUE`` so argparse keeps it verbatim.

    Also reports whether ``-h`` is reached before any unknown argument.
    A value flag given as the last argument is left alone for argparse to
    report as missing.
    """
    out: List[str] = []
    wants_help = False
    known_so_far = True
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in _VALUE_FLAGS and i + 1 < len(argv):
            out.append(f"{_VALUE_FLAGS[arg]}={argv[i + 1]}")
            i += 2
            continue
        if arg in _HELP_FLAGS and known_so_far:
            wants_help = True
        elif not _is_known(arg):
            known_so_far = False
        out.append(arg)
        i += 1
    return out, wants_help


def _parse_args(parser: _ArgumentParser, argv: Optional[List[str]]) -> DumpOptions:
    args, wants_help = _bind_values(sys.argv[1:] if argv is None else list(argv))
    if wants_help:
        parser.print_help(sys.stdout)
        sys.exit(0)
    try:
        ns, extras = parser.parse_known_args(args)
    except UsageError as e:
        _usage_error(parser, f"error: {e}")
    if extras:
        _usage_error(parser, f"Unrecognized option: {extras[0]}")

    if ns.out_fmt not in OUT_FORMATS:
        _usage_error(parser, f"error: invalid output format '{ns.out_fmt}' (must be xml or md)")

    line_filter = None
    if ns.filter:
        try:
            line_filter = re.compile(ns.filter)
        except re.error as e:
            _usage_error(parser, f"error: invalid filter '{ns.filter}': {e}")

    try:
        root = resolve_root(ns.dir if ns.dir is not None else Path.cwd())
    except InvalidRootError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    return DumpOptions(
        root=root,
        ignore_patterns=tuple(ns.ignore),
        include_patterns=tuple(ns.glob),
        line_filter=line_filter,
        out_format=ns.out_fmt,
        xml_tag=ns.xml_tag,
        list_only=ns.list,
        verbose=ns.verbose,
    )


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    try:
        opts = _parse_args(parser, argv)
        root = opts.root

        patterns = build_pattern_set(root, opts.ignore_patterns, verbose=opts.verbose)
        if opts.verbose:
            log(f"textdump v{__version__}: scanning {root} with {len(patterns)} ignore patterns")

        # file bytes pass through unchanged: no newline translation and
        # undecodable bytes are restored from their surrogate escapes
        sys.stdout.reconfigure(encoding="utf-8", errors="surrogateescape", newline="")
        emit(root, patterns, sys.stdout, opts)
        sys.stdout.flush()

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
