import os
from pathlib import Path
from typing import Iterator, Union

import pathspec

SORT_KEY_LINE_WIDTH = 8


def left_pad(value: Union[str, int], width: int) -> str:
    """
    Left-pad *value* with zeros so that it can be sorted lexicographically.
    """
    text = str(value)
    if len(text) >= width:
        return text
    return "0" * (width - len(text)) + text


def make_sort_key(base: str, line: int) -> str:
    """
    Build the ordering key of a comment documenting a node starting at *line*.

    Keys compare as plain strings: first by *base* (traversal pass / file
    order), then by line number for any line up to eight digits.
    """
    return f"{base} {left_pad(line, SORT_KEY_LINE_WIDTH)}"


def get_node_text(node) -> str:
    """
    Get text of the tree sitter node
    """
    if not node or not node.text:
        return ""

    return node.text.decode("utf-8")


def read_source(path: str | Path) -> str:
    """Read a source file as UTF-8 text."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def parse_gitignore(gitignore_path: str | Path) -> "pathspec.PathSpec":
    """
    Parse a .gitignore file at gitignore_path and return a pathspec.PathSpec
    built with the 'gitwildmatch' syntax (same as Git). A missing file yields
    an empty spec.
    """
    gitignore_file = Path(gitignore_path)
    if not gitignore_file.exists() or not gitignore_file.is_file():
        return pathspec.PathSpec.from_lines("gitwildmatch", [])

    raw_lines: list[str] = []
    for raw in gitignore_file.read_text().splitlines():
        raw = raw.rstrip()
        if not raw or raw.lstrip().startswith("#"):
            continue
        raw_lines.append(raw)

    return pathspec.PathSpec.from_lines("gitwildmatch", raw_lines)


def iter_source_files(
    root: str | Path, extensions: list[str], ignored_dirs: set[str]
) -> Iterator[Path]:
    """
    Yield files under *root* with one of *extensions*, skipping *ignored_dirs*
    and anything matched by the top-level .gitignore. Paths come out sorted so
    that runs are reproducible.
    """
    root = Path(root)
    spec = parse_gitignore(root / ".gitignore")
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = Path(dirpath).relative_to(root)
        dirnames[:] = sorted(
            d
            for d in dirnames
            if d not in ignored_dirs and not spec.match_file(f"{rel_dir / d}/")
        )
        for name in sorted(filenames):
            if not name.endswith(tuple(extensions)):
                continue
            if spec.match_file(str(rel_dir / name)):
                continue
            yield Path(dirpath) / name
