"""Host ACL document.

The ACL file is a properties file mapping a scope to a list of hosts::

    admin = 10.0.0.5, 10.0.0.6
    de.prod.web = 10.0.1.0/24
    de.prod.web@rw = 10.0.3.4

``admin`` hosts may run mutating commands and get every permission on every
node. ``app.env.deployment`` scopes grant read access to that deployment's
nodes, or the permissions spelled after ``@`` (r, w, c, d, a).
"""

import io
import ipaddress
import logging
import socket
from typing import Iterable, List, Optional, Tuple, Union

from dotenv.parser import parse_stream
from kazoo.security import ACL, ANYONE_ID_UNSAFE, Id, Permissions

from .domain import AclDocument, HostPermission
from .errors import ParseError

logger = logging.getLogger(__name__)

ADMIN_SCOPE = "admin"
ACL_SCHEME = "ip"

PERMISSION_LETTERS = {
    "r": Permissions.READ,
    "w": Permissions.WRITE,
    "c": Permissions.CREATE,
    "d": Permissions.DELETE,
    "a": Permissions.ADMIN,
}


def parse_permissions(letters: str) -> int:
    perms = 0
    for letter in letters.lower():
        if letter not in PERMISSION_LETTERS:
            raise ValueError(f"unknown permission '{letter}' (expected some of {''.join(PERMISSION_LETTERS)})")
        perms |= PERMISSION_LETTERS[letter]
    if not perms:
        raise ValueError("empty permission set")
    return perms


def parse_scope(key: str) -> Tuple[Optional[str], int]:
    """Split a property key into (scope, permission bits); scope is None for admin."""
    scope, sep, letters = key.partition("@")
    if scope == ADMIN_SCOPE:
        if sep:
            raise ValueError("the admin scope always grants every permission")
        return None, Permissions.ALL

    parts = scope.split(".")
    if len(parts) != 3 or not all(parts):
        raise ValueError(f"scope '{scope}' must be '{ADMIN_SCOPE}' or 'app.env.deployment'")
    return scope, parse_permissions(letters) if sep else Permissions.READ


def check_host(host: str) -> str:
    ipaddress.ip_network(host, strict=False)
    return host


def load(document: str, source: Optional[str] = None) -> AclDocument:
    """Parse ACL properties text into a host -> permission mapping."""
    doc = AclDocument(source=source)

    for binding in parse_stream(io.StringIO(document)):
        line = binding.original.line
        if binding.error:
            raise ParseError(f"Malformed line: {binding.original.string.strip()!r}", source=source, line=line)
        if binding.key is None:
            continue
        if binding.value is None:
            raise ParseError(f"Missing '=' after '{binding.key}'", source=source, line=line)

        try:
            scope, perms = parse_scope(binding.key)
        except ValueError as e:
            raise ParseError(str(e), source=source, line=line)

        hosts = [h.strip() for h in binding.value.split(",") if h.strip()]
        for host in hosts:
            try:
                check_host(host)
            except ValueError:
                raise ParseError(f"'{host}' is not an IP address or network", source=source, line=line)

            permission = doc.hosts.setdefault(host, HostPermission())
            if scope is None:
                permission.admin = True
            else:
                permission.grants[scope] = permission.grants.get(scope, 0) | perms

    logger.debug(f"Loaded ACLs for {len(doc)} hosts ({len(doc.admins)} admin) from {source or '<document>'}")
    return doc


def load_file(path: str) -> AclDocument:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except OSError as e:
        raise ParseError(f"Unable to read ACL file: {e}", source=path)
    return load(text, source=path)


def _matches(host: str, address: str) -> bool:
    """Network containment for IP entries, exact equality for anything else."""
    if host == address:
        return True
    try:
        network = ipaddress.ip_network(host, strict=False)
    except ValueError:
        return False
    try:
        return ipaddress.ip_address(address) in network
    except ValueError:
        return False


def can_administer(doc: AclDocument, current_host: Union[str, Iterable[str]]) -> bool:
    """True if any of the given addresses is listed (or contained) in an admin entry."""
    addresses = [current_host] if isinstance(current_host, str) else list(current_host)
    for host in doc.admins:
        for address in addresses:
            if _matches(host, address):
                logger.debug(f"{address} is an admin host via {host}")
                return True
    logger.debug(f"None of {addresses} is an admin host")
    return False


def compute_acl(doc: AclDocument, app: str, env: str, deployment: str) -> List[ACL]:
    """ACL entries for nodes under app/env/deployment, one per host with any access."""
    scope = f"{app}.{env}.{deployment}"
    acls = []
    for host in sorted(doc.hosts):
        permission = doc.hosts[host]
        perms = Permissions.ALL if permission.admin else permission.grants.get(scope, 0)
        if perms:
            acls.append(ACL(perms, Id(ACL_SCHEME, host)))
    return acls


def compute_host_acl(doc: AclDocument, host: str) -> List[ACL]:
    """ACL for a host's own node: admins get everything, the host may read it."""
    acls = [ACL(Permissions.ALL, Id(ACL_SCHEME, admin)) for admin in doc.admins]
    if host not in doc.admins:
        acls.append(ACL(Permissions.READ, Id(ACL_SCHEME, host)))
    return acls


def compute_hosts_root_acl(doc: AclDocument) -> List[ACL]:
    """ACL for the host list root: admins manage it, anyone may list it."""
    acls = [ACL(Permissions.ALL, Id(ACL_SCHEME, admin)) for admin in doc.admins]
    acls.append(ACL(Permissions.READ, ANYONE_ID_UNSAFE))
    return acls


def host_assignments(doc: AclDocument, host: str) -> List[str]:
    permission = doc.hosts.get(host)
    if permission is None:
        return []
    scopes = sorted(permission.grants)
    return [ADMIN_SCOPE] + scopes if permission.admin else scopes


def local_addresses() -> List[str]:
    """Addresses this machine is known by, used for the admin check."""
    addresses = set()
    for name in {socket.gethostname(), socket.getfqdn()}:
        try:
            _, _, ips = socket.gethostbyname_ex(name)
        except OSError as e:
            logger.debug(f"Unable to resolve {name}: {e}")
            continue
        addresses.update(ips)
    return sorted(addresses)
