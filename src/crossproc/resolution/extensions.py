# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Executable-extension probing (``PATHEXT``) for platforms that need it."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

from ..constants import DEFAULT_PATHEXT
from ..errors import ExecutableNotFoundError

CandidatePredicate = Callable[[Path], bool]


def is_regular_file(path: Path) -> bool:
    """Return ``True`` when ``path`` exists and is a regular file.

    Args:
        path: Candidate to inspect.

    Returns:
        bool: ``False`` for directories, missing paths and unreadable entries.
    """

    try:
        return path.is_file()
    except OSError:
        return False


def parse_pathext(value: str | None) -> tuple[str, ...]:
    """Return the ordered extension list described by a ``PATHEXT`` value.

    Blank entries and case-insensitive duplicates are dropped and every entry is
    lower-cased. The unmodified path (``""``) always comes first.

    Args:
        value: Raw ``PATHEXT`` text; ``None`` or blank selects the default list.

    Returns:
        tuple[str, ...]: Extensions to probe, starting with ``""``.
    """

    raw = value if value and value.strip() else DEFAULT_PATHEXT
    extensions: list[str] = [""]
    for entry in raw.split(";"):
        cleaned = entry.strip().lower()
        if not cleaned:
            continue
        if not cleaned.startswith("."):
            cleaned = f".{cleaned}"
        if cleaned not in extensions:
            extensions.append(cleaned)
    return tuple(extensions)


def iter_candidates(path: Path, extensions: Iterable[str]) -> Iterator[Path]:
    """Yield ``path`` unmodified followed by ``path`` plus each extension.

    Args:
        path: Base path without extension guarantees.
        extensions: Ordered suffixes; ``""`` denotes the unmodified path.

    Yields:
        Path: Candidate paths in probe order without duplicates.
    """

    seen: set[str] = set()
    for extension in ("", *extensions):
        candidate = f"{path}{extension}"
        if candidate in seen:
            continue
        seen.add(candidate)
        yield Path(candidate)


def find_with_extensions(
    path: Path,
    extensions: Iterable[str],
    *,
    predicate: CandidatePredicate = is_regular_file,
) -> Path:
    """Return the first existing candidate for ``path``.

    Args:
        path: Base path to probe.
        extensions: Ordered suffixes to append after trying ``path`` itself.
        predicate: Acceptance test applied to each candidate.

    Returns:
        Path: First candidate accepted by ``predicate``.

    Raises:
        ExecutableNotFoundError: If no candidate is accepted.
    """

    tried: list[Path] = []
    for candidate in iter_candidates(path, extensions):
        if predicate(candidate):
            return candidate
        tried.append(candidate)
    raise ExecutableNotFoundError(str(path), tried)


__all__ = [
    "CandidatePredicate",
    "find_with_extensions",
    "is_regular_file",
    "iter_candidates",
    "parse_pathext",
]
