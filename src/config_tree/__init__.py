from .domain import (
    AclDocument,
    HostPermission,
    RenderedArtifact,
    ResolvedEnvironment,
    RunResult,
    RunState,
    SyncResult,
    Template,
    ValidationIssue,
)
from .errors import (
    AdminPermissionError,
    AmbiguousEnvironmentError,
    ConfigError,
    ConfigTreeError,
    CoordinationConnectionError,
    NotFoundError,
    ParseError,
    SyncError,
    UndefinedKeyError,
)
from .config import CoordinationConfig
from .emitter import emit
from .pipeline import (
    FilesRequest,
    HostsRequest,
    PropsRequest,
    run_files,
    run_hosts,
    run_list,
    run_props,
    run_validate,
)

__all__ = [
    "AclDocument",
    "HostPermission",
    "RenderedArtifact",
    "ResolvedEnvironment",
    "RunResult",
    "RunState",
    "SyncResult",
    "Template",
    "ValidationIssue",
    "AdminPermissionError",
    "AmbiguousEnvironmentError",
    "ConfigError",
    "ConfigTreeError",
    "CoordinationConnectionError",
    "NotFoundError",
    "ParseError",
    "SyncError",
    "UndefinedKeyError",
    "CoordinationConfig",
    "emit",
    "FilesRequest",
    "HostsRequest",
    "PropsRequest",
    "run_files",
    "run_hosts",
    "run_list",
    "run_props",
    "run_validate",
]
