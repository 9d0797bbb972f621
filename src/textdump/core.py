"""
Core logic for textdump package.
"""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, TextIO, Tuple, Union

from colorama import Fore, Style, just_fix_windows_console

from .matcher import matches_any

just_fix_windows_console()

# Exceptions
class TextdumpError(Exception): ...
class UsageError(TextdumpError): ...
class InvalidRootError(TextdumpError): ...

# Defaults & helpers
IGNORE_FILE_NAME = ".gitignore"
SAMPLE_SIZE = 1024
OUT_FORMATS = ("xml", "md")

PatternSet = Tuple[str, ...]


@dataclass(frozen=True)
class FileEntry:
    """A directory entry produced while walking the scan root."""
    path: Path
    rel_path: str
    is_dir: bool = False


@dataclass(frozen=True)
class DumpOptions:
    """Resolved run configuration."""
    root: Path
    ignore_patterns: Tuple[str, ...] = ()
    include_patterns: Tuple[str, ...] = ()
    line_filter: Optional[re.Pattern] = None
    out_format: str = "xml"
    xml_tag: str = "file"
    list_only: bool = False
    verbose: bool = False


def log(msg: str, color: str = "") -> None:
    # stdout carries the dump, so diagnostics always go to stderr
    if color:
        print(color + f"[textdump] {msg}" + Style.RESET_ALL, file=sys.stderr)
    else:
        print(f"[textdump] {msg}", file=sys.stderr)


def resolve_root(root: Union[str, Path]) -> Path:
    if not os.fspath(root):
        raise InvalidRootError("Directory '' does not exist")
    try:
        root = Path(root).resolve()
    except (OSError, RuntimeError) as e:
        raise InvalidRootError(f"Could not resolve root path '{root}': {e}")
    if not root.exists():
        raise InvalidRootError(f"Directory '{root}' does not exist")
    if not root.is_dir():
        raise InvalidRootError(f"'{root}' is not a directory")
    return root


# Ignore-file utilities
def load_ignore_file(root: Path, verbose: bool = False) -> List[str]:
    """Read wildcard patterns from the ``.gitignore`` directly inside *root*.

    Blank lines and ``#`` comments are skipped and a single leading ``/`` is
    dropped. Nothing else is trimmed. A missing or unreadable file yields no
    patterns.
    """
    ignore_path = root / IGNORE_FILE_NAME
    patterns: List[str] = []
    try:
        with ignore_path.open("r", encoding="utf-8", newline="") as fh:
            for line in fh:
                if line.endswith("\n"):
                    line = line[:-1]
                if not line or line.startswith("#"):
                    continue
                if line.startswith("/"):
                    line = line[1:]
                patterns.append(line)
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError) as e:
        if verbose:
            log(f"! Could not read {ignore_path}: {e}", Fore.YELLOW)
        return []
    return patterns


def build_pattern_set(
    root: Path,
    cli_patterns: Sequence[str] = (),
    verbose: bool = False,
) -> PatternSet:
    """CLI patterns first, in the given order, then those from the ignore file."""
    return tuple(cli_patterns) + tuple(load_ignore_file(root, verbose=verbose))


# Text classification
def _is_text_sample(data: bytes) -> bool:
    for b in data:
        # 9..13 are tab, LF, VT, FF and CR
        if b < 9 or 13 < b < 32:
            return False
    return True


def is_text(path: Path) -> bool:
    """Classify *path* as text from its first ``SAMPLE_SIZE`` bytes."""
    try:
        with open(path, "rb") as fh:
            sample = fh.read(SAMPLE_SIZE)
    except OSError:
        return False
    return _is_text_sample(sample)


# Tree walking
def walk(root: Path, patterns: PatternSet, verbose: bool = False) -> Iterator[FileEntry]:
    """Yield every file under *root* that survives *patterns*.

    Directories whose bare name matches are pruned without being opened.
    Files are dropped when either their path relative to *root* or their bare
    name matches. Order follows the filesystem's enumeration order.
    """
    def _on_error(e: OSError) -> None:
        if verbose:
            log(f"! Could not list {e.filename}: {e.strerror}", Fore.YELLOW)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dp = Path(dirpath)
        pruned = [d for d in dirnames if matches_any(d, patterns)]
        dirnames[:] = [d for d in dirnames if d not in pruned]
        if verbose:
            for d in pruned:
                log(f"- Pruning {(dp / d).relative_to(root).as_posix()}/", Fore.YELLOW)

        for name in filenames:
            p = dp / name
            rel = p.relative_to(root).as_posix()
            if matches_any(rel, patterns) or matches_any(name, patterns):
                continue
            # fifos, sockets and dangling links
            if not p.is_file():
                continue
            yield FileEntry(path=p, rel_path=rel)


# Formatting
_LINE_RE = re.compile(r"(?<=\n)")


def _filter_lines(text: str, line_filter: re.Pattern) -> str:
    # only "\n" ends a line; VT and FF stay inside it
    kept = []
    for ln in _LINE_RE.split(text):
        if not ln:
            continue
        body = ln[:-1] if ln.endswith("\n") else ln
        if body.endswith("\r"):
            body = body[:-1]
        if not line_filter.search(body):
            kept.append(ln)
    return "".join(kept)


def format_block(rel: str, content: str, out_format: str = "xml", xml_tag: str = "file") -> str:
    if out_format == "md":
        return f"```{rel}\n{content}\n```\n\n"
    return f'<{xml_tag} path="{rel}">\n{content}\n</{xml_tag}>\n\n'


def read_content(path: Path) -> str:
    """Return the file's bytes as text that encodes back to the same bytes.

    Undecodable bytes become lone surrogates, so the sink must write with
    ``errors="surrogateescape"`` to reproduce them.
    """
    return path.read_bytes().decode("utf-8", errors="surrogateescape")


# Main writer
def emit(
    root: Path,
    patterns: PatternSet,
    sink: TextIO,
    options: Optional[DumpOptions] = None,
) -> int:
    """Write every surviving text file under *root* to *sink*.

    Returns the number of files written.
    """
    if options is None:
        options = DumpOptions(root=root)
    verbose = options.verbose

    written = 0
    skipped: List[str] = []
    for entry in walk(root, patterns, verbose=verbose):
        rel = entry.rel_path
        if options.include_patterns and not (
            matches_any(rel, options.include_patterns)
            or matches_any(entry.path.name, options.include_patterns)
        ):
            continue

        if not is_text(entry.path):
            skipped.append(rel)
            if verbose:
                log(f"- Skipping binary {rel}", Fore.YELLOW)
            continue

        if options.list_only:
            sink.write(f"{rel}\n")
            written += 1
            continue

        try:
            content = read_content(entry.path)
        except OSError as e:
            skipped.append(rel)
            if verbose:
                log(f"! Could not read {rel}: {e}", Fore.YELLOW)
            continue

        if options.line_filter is not None:
            content = _filter_lines(content, options.line_filter)

        sink.write(format_block(rel, content, options.out_format, options.xml_tag))
        written += 1

    if verbose:
        log(f"Done. {written} files written, {len(skipped)} skipped.", Fore.GREEN)
    return written
