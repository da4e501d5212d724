"""In-memory coordination tree for testing and dry runs."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from kazoo.exceptions import BadArgumentsError, InvalidACLError, NoNodeError, NodeExistsError, NotEmptyError
from kazoo.security import ACL, OPEN_ACL_UNSAFE

from .session import CoordinationSession, parent_path

logger = logging.getLogger(__name__)


@dataclass
class Node:
    data: bytes = b""
    acls: List[ACL] = field(default_factory=lambda: list(OPEN_ACL_UNSAFE))


def _node_acl(path: str, acl: Optional[Sequence[ACL]]) -> List[ACL]:
    """None means the default open ACL; an empty list is rejected like ZooKeeper does."""
    if acl is None:
        return list(OPEN_ACL_UNSAFE)
    if not acl:
        raise InvalidACLError(path)
    return list(acl)


class InMemorySession(CoordinationSession):
    """Dictionary-backed tree with ZooKeeper's rules: parents must exist, deletes need no children."""

    def __init__(self, hosts: str = "memory"):
        self.hosts = hosts
        self.nodes: Dict[str, Node] = {"/": Node()}
        self.closed = False

    def _node(self, path: str) -> Node:
        node = self.nodes.get(path)
        if node is None:
            raise NoNodeError(path)
        return node

    def _children(self, path: str) -> List[str]:
        prefix = path.rstrip("/") + "/"
        return sorted(
            p[len(prefix):] for p in self.nodes
            if p != path and p.startswith(prefix) and "/" not in p[len(prefix):]
        )

    def _create(self, path: str, data: bytes, acl: Optional[Sequence[ACL]]) -> None:
        if not path.startswith("/") or path.endswith("/") or "//" in path:
            raise BadArgumentsError(path)
        if path in self.nodes:
            raise NodeExistsError(path)
        if parent_path(path) not in self.nodes:
            raise NoNodeError(parent_path(path))
        self.nodes[path] = Node(bytes(data), _node_acl(path, acl))

    def exists(self, path: str) -> bool:
        return path in self.nodes

    def get(self, path: str) -> bytes:
        return self._node(path).data

    def get_acls(self, path: str) -> List[ACL]:
        return list(self._node(path).acls)

    def ensure(self, path: str, acl: Optional[Sequence[ACL]] = None) -> bool:
        if path in self.nodes:
            return False
        self._create(path, b"", acl)
        return True

    def write(self, path: str, data: bytes, acl: Optional[Sequence[ACL]] = None) -> None:
        if path not in self.nodes:
            self._create(path, data, acl)
            return
        node = self.nodes[path]
        node.data = bytes(data)
        if acl is not None:
            node.acls = _node_acl(path, acl)

    def delete(self, path: str, recursive: bool = False) -> None:
        self._node(path)
        children = self._children(path)
        if children and not recursive:
            raise NotEmptyError(path)
        for child in children:
            self.delete(f"{path.rstrip('/')}/{child}", recursive=True)
        del self.nodes[path]

    def list_children(self, path: str) -> List[str]:
        self._node(path)
        return self._children(path)

    def close(self) -> None:
        self.closed = True

    def snapshot(self) -> Dict[str, bytes]:
        """Path -> data for every node, handy for comparing tree states."""
        return {path: node.data for path, node in sorted(self.nodes.items())}
