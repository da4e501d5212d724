"""End-to-end runs behind the CLI subcommands.

Each run returns a RunResult instead of exiting; the caller decides how to
report it. Registry and rendering failures happen before the first write.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from . import acl, environments
from .config import CoordinationConfig
from .domain import RunResult, RunState, ValidationIssue
from .emitter import emit
from .errors import AdminPermissionError, ConfigTreeError, SyncError
from .templates import list_templates, load_templates, render_all
from .tree import CoordinationSession, connect, join_path, sync_hosts, write_settings

logger = logging.getLogger(__name__)

SessionFactory = Callable[[str, int, float], CoordinationSession]


@dataclass
class PropsRequest:
    envs_file: str
    template_dir: str
    acl_file: str
    deployment: str
    env: Optional[str] = None
    app: Optional[str] = None
    templates: List[str] = field(default_factory=list)
    config: Optional[CoordinationConfig] = None
    # Addresses checked against the admin list; defaults to this machine's
    addresses: Optional[Sequence[str]] = None


@dataclass
class FilesRequest:
    envs_file: str
    template_dir: str
    deployment: str
    dest: str
    env: Optional[str] = None
    app: Optional[str] = None
    templates: List[str] = field(default_factory=list)


@dataclass
class HostsRequest:
    acl_file: str
    config: Optional[CoordinationConfig] = None
    addresses: Optional[Sequence[str]] = None


def _check_admin(acl_doc, addresses: Optional[Sequence[str]]) -> None:
    addresses = list(addresses) if addresses is not None else acl.local_addresses()
    if not acl.can_administer(acl_doc, addresses):
        raise AdminPermissionError(addresses, acl_doc.source)


def _fail_on_sync_errors(sync, base_path: str) -> None:
    if not sync.ok:
        total = len(sync.errors) + len(sync.written)
        raise SyncError(base_path, f"{len(sync.errors)} of {total} writes failed; re-run to retry")


def run_props(request: PropsRequest, session_factory: Optional[SessionFactory] = None) -> RunResult:
    """Render templates for a deployment and load them into ZooKeeper."""
    config = request.config or CoordinationConfig()
    result = RunResult()
    session = None

    try:
        doc = environments.load_file(request.envs_file)
        env = environments.resolve(doc, request.env, request.deployment, app=request.app or config.app)
        result.environment = env
        result.advance(RunState.ENVIRONMENTS_RESOLVED)

        acl_doc = acl.load_file(request.acl_file)
        _check_admin(acl_doc, request.addresses)
        result.advance(RunState.ACL_CHECKED)

        session = (session_factory or connect)(config.host, config.port, config.timeout)
        result.advance(RunState.CONNECTED)

        names = request.templates or list_templates(request.template_dir)
        result.artifacts = render_all(load_templates(request.template_dir, names), env)
        result.advance(RunState.SETTINGS_RENDERED)

        logger.info(f"Starting to load data into the {env.dotted} environment")
        base_path = join_path(env.path)
        acls = acl.compute_acl(acl_doc, env.app, env.env, env.deployment)
        result.sync = write_settings(session, base_path, result.artifacts, acls)
        _fail_on_sync_errors(result.sync, base_path)
        result.advance(RunState.TREE_SYNCED)

        logger.info(f"Done loading data into the {env.dotted} environment")
        result.advance(RunState.DONE)
    except ConfigTreeError as e:
        logger.error(str(e))
        result.fail(e)
    finally:
        if session is not None:
            session.close()

    return result


def run_files(request: FilesRequest) -> RunResult:
    """Render templates for a deployment into a directory."""
    result = RunResult()

    try:
        app = request.app or CoordinationConfig().app
        doc = environments.load_file(request.envs_file)
        env = environments.resolve(doc, request.env, request.deployment, app=app)
        result.environment = env
        result.advance(RunState.ENVIRONMENTS_RESOLVED)

        names = request.templates or list_templates(request.template_dir)
        result.artifacts = render_all(load_templates(request.template_dir, names), env)
        result.advance(RunState.SETTINGS_RENDERED)

        result.files = [str(p) for p in emit(result.artifacts, request.dest)]
        result.advance(RunState.DONE)
    except ConfigTreeError as e:
        logger.error(str(e))
        result.fail(e)

    return result


def run_hosts(request: HostsRequest, session_factory: Optional[SessionFactory] = None) -> RunResult:
    """Replace the host list in ZooKeeper with the hosts in the ACL file."""
    config = request.config or CoordinationConfig()
    result = RunResult()
    session = None

    try:
        acl_doc = acl.load_file(request.acl_file)
        _check_admin(acl_doc, request.addresses)
        result.advance(RunState.ACL_CHECKED)

        session = (session_factory or connect)(config.host, config.port, config.timeout)
        result.advance(RunState.CONNECTED)

        logger.info("Starting to load hosts")
        result.sync = sync_hosts(session, config.hosts_path, acl_doc)
        _fail_on_sync_errors(result.sync, config.hosts_path)
        result.advance(RunState.TREE_SYNCED)

        logger.info("Done loading hosts")
        result.advance(RunState.DONE)
    except ConfigTreeError as e:
        logger.error(str(e))
        result.fail(e)
    finally:
        if session is not None:
            session.close()

    return result


def run_validate(envs_file: str) -> List[ValidationIssue]:
    return environments.validate_file(envs_file)


def run_list(envs_file: str) -> List[Tuple[str, str]]:
    return environments.list_deployments(environments.load_file(envs_file))
