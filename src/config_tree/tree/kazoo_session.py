import logging
from typing import List, Optional, Sequence

from kazoo.client import KazooClient
from kazoo.exceptions import KazooException, NodeExistsError
from kazoo.handlers.threading import KazooTimeoutError
from kazoo.security import ACL

from ..constants import DEFAULT_TIMEOUT, DEFAULT_ZK_PORT
from ..errors import CoordinationConnectionError
from .session import CoordinationSession

logger = logging.getLogger(__name__)

CONNECTION_RETRY = {"max_tries": 3, "delay": 0.5, "backoff": 2}


class KazooSession(CoordinationSession):
    """CoordinationSession backed by a started KazooClient."""

    def __init__(self, client: KazooClient, hosts: str):
        self.client = client
        self.hosts = hosts

    def exists(self, path: str) -> bool:
        return self.client.exists(path) is not None

    def get(self, path: str) -> bytes:
        data, _ = self.client.get(path)
        return data or b""

    def get_acls(self, path: str) -> List[ACL]:
        acls, _ = self.client.get_acls(path)
        return list(acls)

    def ensure(self, path: str, acl: Optional[Sequence[ACL]] = None) -> bool:
        if self.client.exists(path) is not None:
            return False
        try:
            self.client.create(path, b"", acl=None if acl is None else list(acl))
        except NodeExistsError:
            # created concurrently
            return False
        logger.debug(f"Created {path}")
        return True

    def write(self, path: str, data: bytes, acl: Optional[Sequence[ACL]] = None) -> None:
        acl = None if acl is None else list(acl)
        if self.client.exists(path) is None:
            try:
                self.client.create(path, data, acl=acl)
                return
            except NodeExistsError:
                pass
        self.client.set(path, data)
        if acl is not None:
            self.client.set_acls(path, acl)

    def delete(self, path: str, recursive: bool = False) -> None:
        self.client.delete(path, recursive=recursive)

    def list_children(self, path: str) -> List[str]:
        return sorted(self.client.get_children(path))

    def close(self) -> None:
        try:
            self.client.stop()
            self.client.close()
        except KazooException as e:
            logger.warning(f"Error closing ZooKeeper session to {self.hosts}: {e}")


def connect(host: str, port: int = DEFAULT_ZK_PORT, timeout: float = DEFAULT_TIMEOUT) -> KazooSession:
    """Start a ZooKeeper session, waiting at most timeout seconds."""
    hosts = f"{host}:{port}"
    logger.info(f"Connecting to ZooKeeper instance at {hosts}")
    try:
        client = KazooClient(hosts=hosts, timeout=timeout, connection_retry=CONNECTION_RETRY)
    except ValueError as e:
        raise CoordinationConnectionError(hosts, e)

    try:
        client.start(timeout=timeout)
    except (KazooTimeoutError, KazooException, OSError) as e:
        # stop the connection thread start() left running
        client.stop()
        raise CoordinationConnectionError(hosts, e)
    return KazooSession(client, hosts)

