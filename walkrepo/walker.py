"""
Walking a directory tree while honoring the .gitignore files found on the way.

Every directory frame owns its pattern set: the tuple inherited from its parent
plus the patterns of its own rule files. Tuples are never mutated, so patterns
found inside one subtree are invisible to its siblings.
"""

from __future__ import annotations
import logging
import os
from enum import Enum
from pathlib import PurePosixPath
from typing import Callable, FrozenSet, List, Optional, Tuple

from walkrepo.errors import WalkIOError
from walkrepo.gitignore import Pattern, explain, is_excluded, parse_rule_file, parse_rule_lines
from walkrepo.models import EntryInfo, IgnoreStatus, NodeType, WalkOptions

logger = logging.getLogger(__name__)


class WalkAction(str, Enum):
    """What a visitor wants the walker to do next. Raise to abort the walk."""
    CONTINUE = "continue"
    SKIP_SUBTREE = "skip_subtree"


Visitor = Callable[[str, EntryInfo], Optional[WalkAction]]


def walk_repo(root, visitor: Visitor, options: Optional[WalkOptions] = None) -> None:
    """
    Walk `root` depth-first and call `visitor(path, info)` for every entry
    that no applicable .gitignore pattern excludes.

    - Rule files themselves are never visited.
    - Excluded directories are pruned without reading their rule files.
    - A visitor returning WalkAction.SKIP_SUBTREE for a directory keeps the
      walker out of it; any exception it raises aborts the walk unchanged.
    - Directories that cannot be listed and rule files that cannot be read
      raise WalkIOError.
    """
    options = options or WalkOptions()
    root = os.path.abspath(os.fspath(root))
    base = tuple(parse_rule_lines("\n".join(options.exclude)))
    logger.debug(f"Walking {root} with {len(base)} base pattern(s)")
    _walk(root, (), base, visitor, options, frozenset([os.path.realpath(root)]))


def _walk(
    path: str,
    domain: Tuple[str, ...],
    inherited: Tuple[Pattern, ...],
    visitor: Visitor,
    options: WalkOptions,
    ancestors: FrozenSet[str],
) -> None:
    entries = _list_dir(path)
    rule_flags = [_is_rule_file(entry, options) for entry in entries]

    # Read this directory's rule files before looking at anything else in it.
    own: List[Pattern] = []
    for entry, is_rule in zip(entries, rule_flags):
        if is_rule and not os.path.isfile(entry.path):
            logger.warning(f"Not reading rule file {entry.path}: not a regular file")
        elif is_rule:
            own.extend(parse_rule_file(entry.path, domain, options.rule_files))
    patterns = inherited + tuple(own)

    for entry, is_rule in zip(entries, rule_flags):
        if is_rule:
            continue

        rel = domain + (entry.name,)
        info = _entry_info(entry, rel, options)
        if is_excluded(patterns, rel, info.is_dir):
            logger.debug(f"Excluded {info.rel_path}")
            continue

        action = visitor(entry.path, info)
        if not info.is_dir:
            continue
        if action == WalkAction.SKIP_SUBTREE:
            logger.debug(f"Visitor skipped subtree {info.rel_path}")
            continue

        real = os.path.realpath(entry.path)
        if real in ancestors:
            logger.warning(f"Not descending into {entry.path}: symlink loop back to {real}")
            continue
        _walk(entry.path, rel, patterns, visitor, options, ancestors | {real})


def _list_dir(path: str) -> List[os.DirEntry]:
    try:
        with os.scandir(path) as it:
            return sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        raise WalkIOError(path, e) from e


def _is_rule_file(entry: os.DirEntry, options: WalkOptions) -> bool:
    if entry.name not in options.rule_files:
        return False
    # A dangling symlink is still a rule file: it is never visited, only unreadable.
    try:
        return entry.is_file() or entry.is_symlink()
    except OSError:
        return False


def _entry_info(entry: os.DirEntry, rel: Tuple[str, ...], options: WalkOptions) -> EntryInfo:
    follow = options.follow_symlinks
    size = None
    error = None
    try:
        is_dir = entry.is_dir(follow_symlinks=follow)
    except OSError:
        is_dir = False
    try:
        size = entry.stat(follow_symlinks=follow).st_size
    except OSError as e:
        error = str(e)

    return EntryInfo(
        name=entry.name,
        path=entry.path,
        rel_path="/".join(rel),
        node_type=NodeType.DIRECTORY if is_dir else NodeType.FILE,
        is_symlink=entry.is_symlink(),
        size=size,
        error=error,
    )


def _load_rule_files(directory: str, domain: Tuple[str, ...], options: WalkOptions) -> List[Pattern]:
    patterns: List[Pattern] = []
    for name in sorted(options.rule_files):
        candidate = os.path.join(directory, name)
        if os.path.isfile(candidate):
            patterns.extend(parse_rule_file(candidate, domain, options.rule_files))
    return patterns


def _is_dir(path: str, follow_symlinks: bool) -> bool:
    if not follow_symlinks and os.path.islink(path):
        return False
    return os.path.isdir(path)


def ignore_status(root, rel_path: str, options: Optional[WalkOptions] = None) -> IgnoreStatus:
    """
    Decide whether `rel_path` (relative to `root`) would be excluded by a walk
    of `root`, and name the pattern responsible.

    Only the rule files of the path's ancestors are read. When an ancestor
    directory is itself excluded, or is not a directory the walk descends into
    (a file, or a symlink when symlinks are not followed), the walk would never
    reach the path, so it is reported as excluded with `pruned_by` naming that
    ancestor.
    """
    options = options or WalkOptions()
    root = os.path.abspath(os.fspath(root))
    parts = tuple(part for part in PurePosixPath(rel_path.replace(os.sep, "/")).parts if part not in ("", ".", "/"))
    if not parts or ".." in parts:
        raise ValueError(f"{rel_path!r} is not a path below {root}")

    patterns: Tuple[Pattern, ...] = tuple(parse_rule_lines("\n".join(options.exclude)))
    domain: Tuple[str, ...] = ()
    for index, name in enumerate(parts):
        directory = os.path.join(root, *domain)
        patterns += tuple(_load_rule_files(directory, domain, options))

        rel = domain + (name,)
        is_last = index == len(parts) - 1
        if is_last and name in options.rule_files:
            return IgnoreStatus(path="/".join(parts), excluded=False)

        full = os.path.join(root, *rel)
        if is_last:
            is_dir = _is_dir(full, options.follow_symlinks)
        else:
            # Missing ancestors are taken to be directories so that paths
            # which do not exist yet can still be checked.
            is_dir = not os.path.lexists(full) or _is_dir(full, options.follow_symlinks)
        decider = explain(patterns, rel, is_dir)
        excluded = decider is not None and not decider.negated

        if excluded and not is_last:
            return IgnoreStatus(
                path="/".join(parts),
                excluded=True,
                pattern=decider.raw,
                source=decider.source,
                pruned_by="/".join(rel),
            )
        if not is_last and not is_dir:
            # A file or an unfollowed symlink: the walk never descends here.
            return IgnoreStatus(path="/".join(parts), excluded=True, pruned_by="/".join(rel))
        if is_last:
            return IgnoreStatus(
                path="/".join(parts),
                excluded=excluded,
                pattern=decider.raw if decider is not None else None,
                source=decider.source if decider is not None else None,
            )
        domain = rel
