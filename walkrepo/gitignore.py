"""
Compiling .gitignore lines into domain-scoped patterns
and deciding whether a path is excluded by them.
"""

# gitignore.py
from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from pathspec.patterns import GitWildMatchPattern  # pip install pathspec
from pathspec.patterns.gitwildmatch import GitWildMatchPatternError
from pydantic import BaseModel, ConfigDict, PrivateAttr

from walkrepo.errors import NotARuleFileError, RuleFileReadError

logger = logging.getLogger(__name__)

RULE_FILE_NAME = ".gitignore"
# Named group gitwildmatch regexes use for the slash after a matched directory.
DIR_MARK = "ps_d"


class Pattern(BaseModel):
    """One compiled line of a rule file, scoped to the directory that defined it."""

    model_config = ConfigDict(frozen=True)

    raw: str
    segments: Tuple[str, ...]
    domain: Tuple[str, ...] = ()
    anchored: bool = False
    directory_only: bool = False
    negated: bool = False
    source: Optional[str] = None

    _regex: Optional[re.Pattern] = PrivateAttr(default=None)
    _literal: Optional[re.Pattern] = PrivateAttr(default=None)

    def model_post_init(self, __context) -> None:
        glob = self.glob
        try:
            self._regex = GitWildMatchPattern(glob).regex
        except (GitWildMatchPatternError, re.error) as e:
            # Bad glob syntax must not abort a walk: match the text literally.
            logger.debug(f"Falling back to literal match for {self.raw!r}: {e}")
        if self._regex is None:
            self._literal = _literal_regex("/".join(self.segments), self.anchored)

    @property
    def glob(self) -> str:
        """The gitwildmatch text this pattern was built from, without negation."""
        text = "/".join(self.segments)
        if self.anchored and len(self.segments) == 1:
            text = "/" + text
        if self.directory_only:
            text += "/"
        return text

    def matches(self, path: Sequence[str], is_dir: bool) -> bool:
        """True if `path` (components relative to the walk root) lies below
        this pattern's domain and the glob matches what remains.

        Only the entry itself counts: a pattern naming a directory does not
        match the files beneath it here (the walker prunes those instead)."""
        depth = len(self.domain)
        if len(path) <= depth or tuple(path[:depth]) != self.domain:
            return False
        candidate = "/".join(path[depth:])

        if self._literal is not None:
            if self.directory_only and not is_dir:
                return False
            return self._literal.match(candidate) is not None

        mark = _dir_mark(self._regex, candidate)
        if mark == -1:
            return True
        if mark is not None and self.segments[-1] == "**" and not self.directory_only:
            # a trailing "**" matches everything below, at any depth
            return True
        if is_dir:
            # Directory patterns only match names ending in "/", and the
            # mark must sit on that final slash, not on an ancestor's.
            return _dir_mark(self._regex, candidate + "/") == len(candidate)
        return False


def _dir_mark(regex: re.Pattern, candidate: str) -> Optional[int]:
    """Match `candidate`; return None on no match, else the offset of the
    gitwildmatch directory mark (-1 when the mark took no part)."""
    m = regex.match(candidate)
    if m is None:
        return None
    if DIR_MARK not in regex.groupindex:
        return -1
    return m.start(DIR_MARK)


def _literal_regex(text: str, anchored: bool) -> re.Pattern:
    prefix = "^" if anchored else "^(?:.+/)?"
    return re.compile(prefix + re.escape(text) + "$")


def _strip_trailing_spaces(text: str) -> str:
    while text.endswith(" ") and not text.endswith("\\ "):
        text = text[:-1]
    return text


def compile_pattern(line: str, domain: Sequence[str] = (), source: Optional[str] = None) -> Optional[Pattern]:
    """Compile one rule-file line. Returns None for blank lines and comments."""
    text = line.rstrip("\r")
    if not text.strip() or text.startswith("#"):
        return None

    negated = text.startswith("!")
    if negated:
        text = text[1:]
    text = _strip_trailing_spaces(text)

    anchored = text.startswith("/")
    if anchored:
        text = text.lstrip("/")

    directory_only = text.endswith("/") and not text.endswith("\\/")
    if directory_only:
        text = text.rstrip("/")

    if not text:
        logger.debug(f"Ignoring empty pattern {line!r}")
        return None

    segments = tuple(text.split("/"))
    # A slash anywhere but the end ties the pattern to its domain root.
    if len(segments) > 1:
        anchored = True

    return Pattern(
        raw=line.rstrip("\r"),
        segments=segments,
        domain=tuple(domain),
        anchored=anchored,
        directory_only=directory_only,
        negated=negated,
        source=source,
    )


def parse_rule_lines(text: str, domain: Sequence[str] = (), source: Optional[str] = None) -> List[Pattern]:
    patterns: List[Pattern] = []
    for line in text.split("\n"):
        pattern = compile_pattern(line, domain, source)
        if pattern is not None:
            patterns.append(pattern)
    return patterns


def parse_rule_file(
    path: Path | str,
    domain: Sequence[str] = (),
    rule_files: Sequence[str] = (RULE_FILE_NAME,),
) -> List[Pattern]:
    """Read a rule file and compile its lines with the given domain.

    Raises NotARuleFileError if `path` is not named like a rule file and
    RuleFileReadError if it cannot be read.
    """
    path = Path(path)
    if path.name not in rule_files:
        raise NotARuleFileError(f"file {path} is not a {' or '.join(rule_files)} file")

    try:
        with path.open(encoding="utf-8", errors="replace") as fh:
            text = fh.read()
    except OSError as e:
        raise RuleFileReadError(path, e) from e

    patterns = parse_rule_lines(text, domain, source=str(path))
    logger.debug(f"Loaded {len(patterns)} pattern(s) from {path}")
    return patterns


def explain(patterns: Sequence[Pattern], path: Sequence[str], is_dir: bool) -> Optional[Pattern]:
    """Return the last pattern matching `path`, which decides its fate."""
    for pattern in reversed(patterns):
        if pattern.matches(path, is_dir):
            return pattern
    return None


def is_excluded(patterns: Sequence[Pattern], path: Sequence[str], is_dir: bool) -> bool:
    """Return True if `path` is excluded; the last matching pattern wins."""
    pattern = explain(patterns, path, is_dir)
    return pattern is not None and not pattern.negated
