from .session import CoordinationSession, join_path, parent_path
from .kazoo_session import KazooSession, connect
from .memory import InMemorySession
from .sync import ensure_path, host_node_name, sync_hosts, write_settings

__all__ = [
    "CoordinationSession",
    "join_path",
    "parent_path",
    "KazooSession",
    "connect",
    "InMemorySession",
    "ensure_path",
    "host_node_name",
    "sync_hosts",
    "write_settings",
]
