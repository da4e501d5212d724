"""Exceptions raised by config-tree."""
from typing import List, Optional


class ConfigTreeError(Exception):
    """Base exception for config-tree errors."""
    pass


class ConfigError(ConfigTreeError):
    """Raised when the coordination settings fail validation."""
    pass


class ParseError(ConfigTreeError):
    def __init__(self, message: str, source: Optional[str] = None, line: Optional[int] = None):
        location = source or "<document>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"{location}: {message}")
        self.source = source
        self.line = line


class NotFoundError(ConfigTreeError):
    pass


class AmbiguousEnvironmentError(ConfigTreeError):
    def __init__(self, deployment: str, environments: List[str]):
        msg = (
            f"Deployment '{deployment}' is defined in more than one environment "
            f"({', '.join(environments)}); specify the environment explicitly"
        )
        super().__init__(msg)
        self.deployment = deployment
        self.environments = environments


class UndefinedKeyError(ConfigTreeError):
    def __init__(self, key: str, template: str):
        super().__init__(f"Template '{template}' references undefined setting '{key}'")
        self.key = key
        self.template = template


class AdminPermissionError(ConfigTreeError, PermissionError):
    def __init__(self, addresses: List[str], source: Optional[str] = None):
        where = f" in {source}" if source else ""
        msg = f"This machine ({', '.join(addresses) or 'no address'}) isn't listed as an admin machine{where}"
        super().__init__(msg)
        self.addresses = addresses
        self.source = source


class CoordinationConnectionError(ConfigTreeError, ConnectionError):
    def __init__(self, hosts: str, cause: Optional[BaseException] = None):
        msg = f"Unable to connect to ZooKeeper at {hosts}"
        if cause is not None:
            msg = f"{msg}: {cause}"
        super().__init__(msg)
        self.hosts = hosts
        self.cause = cause


class SyncError(ConfigTreeError):
    def __init__(self, path: str, reason: str, template: Optional[str] = None):
        subject = f"template '{template}' at {path}" if template else path
        super().__init__(f"Failed to write {subject}: {reason}")
        self.path = path
        self.reason = reason
        self.template = template
