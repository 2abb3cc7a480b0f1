"""Collaborators of the security model: password hash, events and path matching."""

from .events import EventManager
from .hashing import Hash, PasslibHash, build_hash
from .matcher import GlobPathMatcher, PathMatcher

__all__ = [
    "EventManager",
    "GlobPathMatcher",
    "Hash",
    "PasslibHash",
    "PathMatcher",
    "build_hash",
]
