"""Reconcile rendered settings and host lists with the coordination tree.

Settings are merged: nodes are created or overwritten but never removed, so
manually managed nodes next to them survive. The host subtree is an
authoritative snapshot and is fully rewritten, stale hosts included.
"""

import logging
from typing import Iterable, Optional, Sequence
from urllib.parse import quote

from kazoo.exceptions import ConnectionLoss, KazooException, SessionExpiredError
from kazoo.security import ACL

from ..acl import compute_host_acl, compute_hosts_root_acl, host_assignments
from ..domain import AclDocument, RenderedArtifact, SyncResult
from ..errors import CoordinationConnectionError, SyncError
from .session import CoordinationSession, join_path, parent_path

logger = logging.getLogger(__name__)

LOST_SESSION = (ConnectionLoss, SessionExpiredError)


def _describe(error: Exception) -> str:
    return str(error) or type(error).__name__


def ensure_path(session: CoordinationSession, path: str, acl: Optional[Sequence[ACL]] = None) -> None:
    """Create every missing node on the way to path, root first."""
    current = ""
    for part in [p for p in path.split("/") if p]:
        current = f"{current}/{part}"
        if session.ensure(current, acl):
            logger.debug(f"Created {current}")


def _artifact_path(base_path: str, name: str) -> str:
    segments = name.split("/")
    if not all(segments) or any(s in (".", "..") for s in segments):
        raise SyncError(join_path(base_path, name), "invalid node name", template=name)
    return join_path(base_path, name)


def _check_collisions(session: CoordinationSession, base_path: str, path: str, name: str) -> None:
    """A template may not turn a valued node into a directory, or a directory into a value."""
    current = parent_path(path)
    while len(current) > len(base_path):
        if session.exists(current) and session.get(current):
            raise SyncError(path, f"intermediate node {current} already holds a value", template=name)
        current = parent_path(current)

    if session.exists(path) and session.list_children(path):
        raise SyncError(path, "node already has children", template=name)


def write_settings(
    session: CoordinationSession,
    base_path: str,
    artifacts: Iterable[RenderedArtifact],
    acl: Optional[Sequence[ACL]] = None
) -> SyncResult:
    """Write each artifact to base_path/<name> with the given ACL.

    Artifacts are independent: a failed write is recorded as a SyncError and
    the rest still go through. A lost session aborts the whole pass. An empty
    ACL would leave the nodes inaccessible and is refused; pass None to keep
    the store default.
    """
    base_path = join_path(base_path)
    result = SyncResult()

    if acl is not None and not acl:
        raise SyncError(base_path, "no host may access these nodes (empty ACL)")

    try:
        ensure_path(session, base_path, acl)
    except LOST_SESSION as e:
        raise CoordinationConnectionError(session.hosts, e)
    except KazooException as e:
        raise SyncError(base_path, _describe(e))

    for artifact in artifacts:
        try:
            path = _artifact_path(base_path, artifact.name)
            _check_collisions(session, base_path, path, artifact.name)
            ensure_path(session, parent_path(path), acl)
            session.write(path, artifact.content, acl)
        except LOST_SESSION as e:
            raise CoordinationConnectionError(session.hosts, e)
        except SyncError as e:
            logger.error(str(e))
            result.errors.append(e)
            continue
        except KazooException as e:
            error = SyncError(path, _describe(e), template=artifact.name)
            logger.error(str(error))
            result.errors.append(error)
            continue

        logger.info(f"Wrote {path} ({len(artifact.content)} bytes)")
        result.written.append(path)

    return result


def host_node_name(host: str) -> str:
    """Node name for a host; CIDR slashes and IPv6 colons are percent-encoded."""
    return quote(host, safe="")


def sync_hosts(session: CoordinationSession, base_path: str, acl_doc: AclDocument) -> SyncResult:
    """Rewrite the host list under base_path so it matches acl_doc exactly."""
    base_path = join_path(base_path)
    result = SyncResult()

    try:
        ensure_path(session, base_path, compute_hosts_root_acl(acl_doc))
    except LOST_SESSION as e:
        raise CoordinationConnectionError(session.hosts, e)
    except KazooException as e:
        raise SyncError(base_path, _describe(e))

    desired = {host_node_name(host): host for host in acl_doc.hosts}

    for name in sorted(desired):
        host = desired[name]
        path = join_path(base_path, name)
        data = ",".join(host_assignments(acl_doc, host)).encode("utf-8")
        try:
            session.write(path, data, compute_host_acl(acl_doc, host))
        except LOST_SESSION as e:
            raise CoordinationConnectionError(session.hosts, e)
        except KazooException as e:
            error = SyncError(path, _describe(e))
            logger.error(str(error))
            result.errors.append(error)
            continue
        logger.info(f"Wrote host {host}")
        result.written.append(path)

    try:
        existing = session.list_children(base_path)
    except LOST_SESSION as e:
        raise CoordinationConnectionError(session.hosts, e)
    except KazooException as e:
        result.errors.append(SyncError(base_path, _describe(e)))
        return result

    for name in sorted(set(existing) - set(desired)):
        path = join_path(base_path, name)
        try:
            session.delete(path, recursive=True)
        except LOST_SESSION as e:
            raise CoordinationConnectionError(session.hosts, e)
        except KazooException as e:
            error = SyncError(path, f"unable to remove stale host: {_describe(e)}")
            logger.error(str(error))
            result.errors.append(error)
            continue
        logger.info(f"Removed stale host node {path}")
        result.deleted.append(path)

    return result
