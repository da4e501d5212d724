"""Data models for config-tree."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

# env name -> deployment name -> settings
EnvironmentDocument = Dict[str, Dict[str, Dict[str, Any]]]


def freeze(value: Any) -> Any:
    """Return a read-only copy of nested mappings and lists."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class ResolvedEnvironment:
    """Settings selected for one (app, env, deployment) triple."""
    app: str
    env: str
    deployment: str
    settings: Mapping[str, Any]

    def __post_init__(self):
        object.__setattr__(self, "settings", freeze(self.settings))

    @property
    def path(self) -> str:
        return f"{self.app}/{self.env}/{self.deployment}"

    @property
    def dotted(self) -> str:
        return f"{self.app}.{self.env}.{self.deployment}"


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    severity: str = "error"  # 'error' | 'warning'
    env: Optional[str] = None
    deployment: Optional[str] = None
    key: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == "error"


@dataclass(frozen=True)
class Template:
    name: str
    content: str


@dataclass(frozen=True)
class RenderedArtifact:
    name: str
    content: bytes


@dataclass
class HostPermission:
    """Permission descriptor for one host or network."""
    admin: bool = False
    grants: Dict[str, int] = field(default_factory=dict)  # "app.env.dep" -> kazoo Permissions bits


@dataclass
class AclDocument:
    hosts: Dict[str, HostPermission] = field(default_factory=dict)
    source: Optional[str] = None

    def __contains__(self, host: str) -> bool:
        return host in self.hosts

    def __len__(self) -> int:
        return len(self.hosts)

    @property
    def admins(self) -> List[str]:
        return sorted(h for h, p in self.hosts.items() if p.admin)


@dataclass
class SyncResult:
    """Outcome of a tree synchronization pass."""
    written: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    errors: List[Exception] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class RunState(Enum):
    IDLE = "idle"
    ENVIRONMENTS_RESOLVED = "environments_resolved"
    ACL_CHECKED = "acl_checked"
    CONNECTED = "connected"
    SETTINGS_RENDERED = "settings_rendered"
    TREE_SYNCED = "tree_synced"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunResult:
    """Result of a pipeline run; the CLI maps it to an exit code."""
    state: RunState = RunState.IDLE
    history: List[RunState] = field(default_factory=list)
    environment: Optional[ResolvedEnvironment] = None
    artifacts: List[RenderedArtifact] = field(default_factory=list)
    sync: Optional[SyncResult] = None
    files: List[str] = field(default_factory=list)
    error: Optional[Exception] = None

    def advance(self, state: RunState) -> None:
        self.history.append(state)
        self.state = state

    def fail(self, error: Exception) -> None:
        self.error = error
        self.advance(RunState.FAILED)

    @property
    def ok(self) -> bool:
        return self.state == RunState.DONE

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1
