"""Coordination session contract used by the synchronizer.

Implementations raise kazoo.exceptions errors (NoNodeError, NodeExistsError,
NotEmptyError, ...) so that callers handle every backend the same way.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from kazoo.security import ACL


def join_path(*parts: str) -> str:
    """Join path pieces into an absolute, slash-delimited node path."""
    segments = []
    for part in parts:
        segments.extend(s for s in part.split("/") if s)
    return "/" + "/".join(segments)


def parent_path(path: str) -> str:
    parent = path.rstrip("/").rsplit("/", 1)[0]
    return parent or "/"


class CoordinationSession(ABC):
    """A connected hierarchical key-value store with per-node ACLs."""

    hosts: str = ""

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def get(self, path: str) -> bytes:
        pass

    @abstractmethod
    def get_acls(self, path: str) -> List[ACL]:
        pass

    @abstractmethod
    def ensure(self, path: str, acl: Optional[Sequence[ACL]] = None) -> bool:
        """Create path with empty content if it is missing; the parent must exist.

        Returns True when the node was created.
        """
        pass

    @abstractmethod
    def write(self, path: str, data: bytes, acl: Optional[Sequence[ACL]] = None) -> None:
        """Create or overwrite path and (re)apply its ACL."""
        pass

    @abstractmethod
    def delete(self, path: str, recursive: bool = False) -> None:
        pass

    @abstractmethod
    def list_children(self, path: str) -> List[str]:
        pass

    def close(self) -> None:
        pass

    def __enter__(self) -> 'CoordinationSession':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
