"""Environment definitions: loading, validation and (env, deployment) resolution.

An environment document is YAML shaped as ``env -> deployment -> settings``::

    prod:
      web:
        db:
          host: db1
          port: "5432"
      worker:
        db.host: db2

Settings may nest mappings (or use dotted keys); leaves must be scalars.
"""

import datetime
import logging
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from .constants import DEFAULT_APP
from .domain import EnvironmentDocument, ResolvedEnvironment, ValidationIssue
from .errors import AmbiguousEnvironmentError, NotFoundError, ParseError
from .sensitive import mask_settings

logger = logging.getLogger(__name__)

SCALAR_TYPES = (str, int, float, bool, datetime.date)


def load(document: Union[str, Mapping[str, Any], None], source: Optional[str] = None) -> EnvironmentDocument:
    """Parse and structurally check an environment document.

    Raises ParseError on YAML errors or on any error-severity issue that
    validate() would report. Warnings (duplicate deployments, inconsistent
    keys) are logged and left to resolve().
    """
    if isinstance(document, str):
        try:
            data = yaml.safe_load(document)
        except yaml.YAMLError as e:
            raise ParseError(f"YAML parsing error: {e}", source=source)
    else:
        data = document

    if data is None:
        data = {}

    issues = validate(data)
    errors = [i for i in issues if i.is_error]
    if errors:
        for issue in errors:
            logger.error(f"{source or '<document>'}: {issue.message}")
        extra = f" (and {len(errors) - 1} more)" if len(errors) > 1 else ""
        raise ParseError(errors[0].message + extra, source=source)

    for issue in issues:
        logger.warning(f"{source or '<document>'}: {issue.message}")

    return {env: {dep: dict(settings) for dep, settings in deps.items()} for env, deps in data.items()}


def load_file(path: str) -> EnvironmentDocument:
    logger.debug(f"Loading environments from {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except OSError as e:
        raise ParseError(f"Unable to read environments file: {e}", source=path)
    return load(text, source=path)


def resolve(
    doc: EnvironmentDocument,
    env: Optional[str],
    deployment: str,
    app: str = DEFAULT_APP
) -> ResolvedEnvironment:
    """Select the settings for a deployment.

    With an explicit env this is a direct lookup. Without one every
    environment is scanned and the deployment must appear in exactly one.
    """
    if env is not None:
        deployments = doc.get(env)
        if deployments is None:
            raise NotFoundError(f"No environment named '{env}'")
        if deployment not in deployments:
            raise NotFoundError(f"No environment defined for {app}.{env}.{deployment}")
        settings = deployments[deployment]
    else:
        matches = [name for name, deployments in doc.items() if deployment in deployments]
        if not matches:
            raise NotFoundError(f"Deployment '{deployment}' is not defined in any environment")
        if len(matches) > 1:
            raise AmbiguousEnvironmentError(deployment, sorted(matches))
        env = matches[0]
        settings = doc[env][deployment]

    logger.info(f"Resolved {app}.{env}.{deployment}")
    for key, value in mask_settings(flatten_settings(settings)).items():
        logger.debug(f"  {key} = {value}")

    return ResolvedEnvironment(app=app, env=env, deployment=deployment, settings=settings)


def validate(doc: Any) -> List[ValidationIssue]:
    """Report structural problems without raising."""
    issues: List[ValidationIssue] = []

    if not isinstance(doc, Mapping):
        return [ValidationIssue(
            "invalid-structure",
            f"Environment document must be a mapping of environments, got {type(doc).__name__}",
        )]

    locations: Dict[str, List[str]] = defaultdict(list)
    flattened: Dict[Tuple[str, str], Dict[str, Any]] = {}

    for env, deployments in doc.items():
        if not isinstance(env, str):
            issues.append(ValidationIssue("non-string-key", f"Environment name {env!r} is not a string"))
            continue
        if deployments is None or (isinstance(deployments, Mapping) and not deployments):
            issues.append(ValidationIssue(
                "empty-environment", f"Environment '{env}' defines no deployments", env=env))
            continue
        if not isinstance(deployments, Mapping):
            issues.append(ValidationIssue(
                "invalid-structure",
                f"Environment '{env}' must map deployment names to settings, got {type(deployments).__name__}",
                env=env,
            ))
            continue

        for dep, settings in deployments.items():
            if not isinstance(dep, str):
                issues.append(ValidationIssue(
                    "non-string-key", f"Deployment name {dep!r} in '{env}' is not a string", env=env))
                continue
            if not isinstance(settings, Mapping):
                issues.append(ValidationIssue(
                    "invalid-structure",
                    f"Deployment '{env}.{dep}' must be a mapping of settings, got {type(settings).__name__}",
                    env=env, deployment=dep,
                ))
                continue
            locations[dep].append(env)
            issues.extend(_check_settings(settings, env, dep, prefix=""))
            flattened[(env, dep)] = flatten_settings(settings)

    for dep, envs in sorted(locations.items()):
        if len(envs) > 1:
            issues.append(ValidationIssue(
                "duplicate-deployment",
                f"Deployment '{dep}' appears in more than one environment: {', '.join(sorted(envs))}",
                severity="warning", deployment=dep,
            ))

    issues.extend(_check_consistent_keys(flattened))
    return issues


def _check_settings(settings: Mapping, env: str, dep: str, prefix: str) -> List[ValidationIssue]:
    issues = []
    for key, value in settings.items():
        if not isinstance(key, str):
            issues.append(ValidationIssue(
                "non-string-key", f"Setting key {key!r} in '{env}.{dep}' is not a string",
                env=env, deployment=dep))
            continue
        path = f"{prefix}{key}"
        if isinstance(value, Mapping):
            issues.extend(_check_settings(value, env, dep, prefix=f"{path}."))
        elif not isinstance(value, SCALAR_TYPES):
            kind = "null" if value is None else type(value).__name__
            issues.append(ValidationIssue(
                "non-scalar-leaf", f"Setting '{path}' in '{env}.{dep}' must be a scalar, got {kind}",
                env=env, deployment=dep, key=path))
    return issues


def _check_consistent_keys(flattened: Dict[Tuple[str, str], Dict[str, Any]]) -> List[ValidationIssue]:
    if len(flattened) < 2:
        return []

    all_keys = set()
    for keys in flattened.values():
        all_keys.update(keys)

    issues = []
    for key in sorted(all_keys):
        missing = sorted(f"{env}.{dep}" for (env, dep), keys in flattened.items() if key not in keys)
        if missing:
            issues.append(ValidationIssue(
                "inconsistent-keys",
                f"Setting '{key}' is missing from: {', '.join(missing)}",
                severity="warning", key=key,
            ))
    return issues


def flatten_settings(settings: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Dotted-key view of nested settings."""
    flat = {}
    for key, value in settings.items():
        path = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(flatten_settings(value, f"{path}."))
        else:
            flat[path] = value
    return flat


def list_environments(doc: EnvironmentDocument) -> List[str]:
    return sorted(doc)


def list_deployments(doc: EnvironmentDocument) -> List[Tuple[str, str]]:
    return sorted((env, dep) for env, deployments in doc.items() for dep in deployments)


def validate_file(path: str) -> List[ValidationIssue]:
    """validate() for a file on disk; unreadable or unparseable files become issues too."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        return [ValidationIssue("unreadable", f"Unable to read {path}: {e}")]
    except yaml.YAMLError as e:
        return [ValidationIssue("yaml-syntax", f"YAML parsing error in {path}: {e}")]
    return validate({} if data is None else data)
