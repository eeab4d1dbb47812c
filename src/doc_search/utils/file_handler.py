"""
Cross-platform file handling utilities using pathlib.

All file operations use Path objects for cross-platform compatibility.
"""

import json
import os
import tempfile
from itertools import islice
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from loguru import logger

from doc_search.exceptions import InvalidPathError, ParseError


def read_text(file_path: Path, encoding: str = "utf-8") -> str:
    """
    Read text file with strict decoding.

    Line endings are returned untranslated, so CRLF files keep their CRLF endings.

    Args:
        file_path: Path to file
        encoding: Text encoding

    Returns:
        File contents as string

    Raises:
        FileNotFoundError: If file does not exist
        ParseError: If file cannot be decoded or read
    """
    file_path = Path(file_path)

    try:
        with open(file_path, "r", encoding=encoding, newline="") as f:
            return f.read()
    except FileNotFoundError:
        raise
    except UnicodeDecodeError as e:
        raise ParseError(f"Not valid {encoding}: {file_path}: {e}") from e
    except OSError as e:
        raise ParseError(f"Failed to read {file_path}: {e}") from e


def split_lines(text: str) -> List[str]:
    """
    Split text on ``\\n`` only, keeping line endings.

    Unlike ``str.splitlines()``, characters such as U+2028 or form feed do
    not start a new line, so positions agree with ``count_lines`` and with
    any newline-based reader.
    """
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def read_lines(file_path: Path, encoding: str = "utf-8") -> List[str]:
    """Read file as lines, keeping line endings"""
    return split_lines(read_text(file_path, encoding=encoding))


def count_lines(file_path: Path) -> int:
    """
    Count lines in a file without decoding it.

    A final line without a trailing newline still counts.
    """
    count = 0
    last = b"\n"
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            count += chunk.count(b"\n")
            last = chunk[-1:]
    if last != b"\n":
        count += 1
    return count


def read_head(file_path: Path, k: int) -> List[str]:
    """Read at most the first k lines of a text file"""
    with open(file_path, "r", encoding="utf-8") as f:
        return [line.rstrip("\n") for line in islice(f, k)]


def iter_jsonl(file_path: Path) -> Iterator[Tuple[int, Dict[str, Any]]]:
    """
    Iterate over a JSONL file as (line position, record) pairs.

    Raises:
        ParseError: On a line that is not a JSON object
    """
    with open(file_path, "r", encoding="utf-8") as f:
        try:
            for position, line in enumerate(f):
                yield position, parse_json_line(line, file_path, position)
        except UnicodeDecodeError as e:
            raise ParseError(f"Not valid utf-8: {file_path}: {e}") from e


def parse_json_line(line: str, file_path: Path, position: int) -> Dict[str, Any]:
    """Decode one JSONL line, raising ParseError with location on failure"""
    try:
        record = json.loads(line)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in {file_path} line {position}: {e}") from e
    if not isinstance(record, dict):
        raise ParseError(f"Expected JSON object in {file_path} line {position}")
    return record


def write_temp_file(lines: Iterable[str], directory: Path, prefix: str) -> Path:
    """
    Write lines to a fsynced temporary file inside directory.

    The caller renames the result into place with ``os.replace``.

    Args:
        lines: Lines to write (newline appended to each)
        directory: Target directory (same filesystem as the final file)
        prefix: Temporary file name prefix

    Returns:
        Path to the temporary file
    """
    fd, temp_name = tempfile.mkstemp(prefix=prefix, suffix=".tmp", dir=directory)
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            for line in lines:
                f.write(line)
                f.write("\n")
            f.flush()
            os.fsync(f.fileno())
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    logger.debug(f"Wrote temporary file: {temp_path}")
    return temp_path


def fsync_directory(directory: Path):
    """Flush directory metadata so renames survive a crash (no-op where unsupported)"""
    if os.name != "posix":
        return
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def resolve_relative(root: Path, relative_path: str) -> Path:
    """
    Resolve relative_path under root, refusing paths that escape it.

    Raises:
        InvalidPathError: If the path is absolute or leaves root
    """
    root = Path(root).resolve()
    candidate = Path(relative_path)
    if candidate.is_absolute():
        raise InvalidPathError(f"Absolute relative_path not allowed: {relative_path}")

    resolved = (root / candidate).resolve()
    if resolved != root and root not in resolved.parents:
        raise InvalidPathError(f"Path escapes collection root {root}: {relative_path}")
    return resolved


def list_files(
    directory: Path,
    patterns: Iterable[str],
    exclude_dirs: Optional[Set[Path]] = None
) -> List[Path]:
    """
    Recursively list files matching any glob pattern.

    Hidden directories and any directory in exclude_dirs are pruned.

    Args:
        directory: Directory to search
        patterns: Glob patterns matched against file names (e.g., "*.md")
        exclude_dirs: Resolved directories to skip entirely

    Returns:
        Sorted list of matching file paths
    """
    directory = Path(directory)
    exclude_dirs = exclude_dirs or set()
    patterns = list(patterns)
    matches = []

    for current, dirnames, filenames in os.walk(directory):
        current_path = Path(current)
        dirnames[:] = sorted(
            d for d in dirnames
            if not d.startswith(".") and (current_path / d).resolve() not in exclude_dirs
        )
        for name in filenames:
            if name.startswith("."):
                continue
            if any(Path(name).match(pattern) for pattern in patterns):
                matches.append(current_path / name)

    return sorted(matches)
