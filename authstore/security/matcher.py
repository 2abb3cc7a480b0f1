"""Path matching for path based access rules.

Pattern syntax of the glob matcher:

- ``*`` matches within a single path segment
- ``**`` matches anything, a trailing ``/**`` also matches the bare prefix
- a leading ``!`` turns the pattern into a deny rule
- a trailing ``[GET,POST]`` limits the pattern to those request methods

Deny rules win over allow rules.
"""

import re
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import FrozenSet, Iterable, NamedTuple, Optional, Pattern

METHODS_PATTERN = re.compile(r"^(?P<path>.*?)\s*\[(?P<methods>[A-Za-z,\s|]*)\]\s*$")


class PathMatcher(ABC):
    """Decides whether a request path matches a set of path patterns."""

    @abstractmethod
    def matches(self, path: str, method: Optional[str], patterns: Iterable[str]) -> bool:
        pass


class PathRule(NamedTuple):
    """A compiled path pattern."""

    regex: Pattern
    methods: FrozenSet[str]
    deny: bool

    def applies(self, path: str, method: Optional[str]) -> bool:
        if self.methods and (not method or method.upper() not in self.methods):
            return False
        return self.regex.match(path) is not None


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> PathRule:
    """Compile a path pattern into a rule.

    Args:
        pattern: Pattern in the glob matcher syntax

    Returns:
        PathRule instance
    """
    pattern = pattern.strip()

    deny = pattern.startswith("!")
    if deny:
        pattern = pattern[1:].strip()

    methods: FrozenSet[str] = frozenset()
    match = METHODS_PATTERN.match(pattern)
    if match:
        pattern = match.group("path")
        methods = frozenset(
            method.strip().upper()
            for method in re.split(r"[,|]", match.group("methods"))
            if method.strip()
        )

    suffix = "$"
    if pattern.endswith("/**"):
        pattern = pattern[:-3]
        suffix = "(/.*)?$"

    regex = ""
    for index, part in enumerate(pattern.split("**")):
        if index:
            regex += ".*"
        regex += "[^/]*".join(re.escape(segment) for segment in part.split("*"))

    return PathRule(re.compile("^" + regex + suffix), methods, deny)


class GlobPathMatcher(PathMatcher):
    """Path matcher using the glob pattern syntax."""

    def matches(self, path: str, method: Optional[str], patterns: Iterable[str]) -> bool:
        allowed = False
        for pattern in patterns:
            rule = compile_pattern(pattern)
            if not rule.applies(path, method):
                continue
            if rule.deny:
                return False
            allowed = True

        return allowed
