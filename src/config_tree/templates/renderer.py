"""Template discovery and rendering."""

import logging
import os
from typing import Any, Iterable, List, Mapping, Union

from ..constants import TEMPLATE_SUFFIX
from ..domain import RenderedArtifact, ResolvedEnvironment, Template
from ..errors import NotFoundError, ParseError, UndefinedKeyError
from ..sensitive import mask_value
from .coercion import coerce_to_string
from .extractor import extract_placeholders
from .resolver import lookup_path

logger = logging.getLogger(__name__)


def _template_name(rel_path: str) -> str:
    name = rel_path.replace(os.sep, "/")
    if name.endswith(TEMPLATE_SUFFIX) and len(name) > len(TEMPLATE_SUFFIX):
        name = name[:-len(TEMPLATE_SUFFIX)]
    return name


def list_templates(template_dir: str) -> List[str]:
    """Names of every template under template_dir, sorted.

    Names are POSIX relative paths with the .tmpl suffix removed. Hidden
    files and directories are skipped.
    """
    if not os.path.isdir(template_dir):
        raise NotFoundError(f"Template directory not found: {template_dir}")

    sources = {}
    for root, dirs, files in os.walk(template_dir):
        dirs[:] = sorted(d for d in dirs if not d.startswith("."))
        for filename in sorted(files):
            if filename.startswith("."):
                continue
            rel_path = os.path.relpath(os.path.join(root, filename), template_dir)
            name = _template_name(rel_path)
            if name in sources:
                raise ParseError(
                    f"Templates '{sources[name]}' and '{rel_path}' both render to '{name}'",
                    source=template_dir,
                )
            sources[name] = rel_path

    names = sorted(sources)
    logger.debug(f"Found {len(names)} templates in {template_dir}")
    return names


def load_template(template_dir: str, name: str) -> Template:
    base = os.path.realpath(template_dir)
    matches = []
    for candidate in (name + TEMPLATE_SUFFIX, name):
        path = os.path.realpath(os.path.join(base, candidate))
        if os.path.commonpath([base, path]) != base:
            raise NotFoundError(f"Template '{name}' is outside {template_dir}")
        if os.path.isfile(path):
            matches.append(path)

    if not matches:
        raise NotFoundError(f"Template '{name}' not found in {template_dir}")
    if len(matches) > 1:
        raise ParseError(f"Template '{name}' is ambiguous: both {name}{TEMPLATE_SUFFIX} and {name} exist",
                         source=template_dir)

    try:
        with open(matches[0], "r", encoding="utf-8") as f:
            return Template(name=name, content=f.read())
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"Unable to read template: {e}", source=matches[0])



def load_templates(template_dir: str, names: Iterable[str]) -> List[Template]:
    return [load_template(template_dir, name) for name in names]


def render(template: Template, env: Union[ResolvedEnvironment, Mapping[str, Any]]) -> RenderedArtifact:
    """
    Substitute every ${path} in the template with the matching setting.
    Unknown paths raise UndefinedKeyError; nothing is substituted silently.
    """
    settings = env.settings if isinstance(env, ResolvedEnvironment) else env

    # Substituted values are never rescanned; only the template text is.
    parts = []
    position = 0
    for placeholder in extract_placeholders(template.content):
        try:
            found, value = lookup_path(settings, placeholder["path"])
        except ValueError as e:
            raise ParseError(
                f"Invalid placeholder {placeholder['raw']!r}: {e}",
                source=template.name, line=placeholder["line"],
            )
        if not found:
            raise UndefinedKeyError(placeholder["path"], template.name)
        text = coerce_to_string(value)
        logger.debug(f"  {template.name}: {placeholder['path']} = {mask_value(placeholder['path'], text)}")
        parts.append(template.content[position:placeholder["start"]])
        parts.append(text)
        position = placeholder["end"]
    parts.append(template.content[position:])

    return RenderedArtifact(name=template.name, content="".join(parts).encode("utf-8"))


def render_all(
    templates: Iterable[Template],
    env: Union[ResolvedEnvironment, Mapping[str, Any]]
) -> List[RenderedArtifact]:
    """Render in order; the first failure aborts the batch."""
    artifacts = [render(template, env) for template in templates]
    logger.info(f"Rendered {len(artifacts)} templates")
    return artifacts
