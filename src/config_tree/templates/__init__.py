from .extractor import extract_placeholders
from .renderer import list_templates, load_template, load_templates, render, render_all
from .resolver import lookup_path
from .path_parser import parse_path

__all__ = [
    "extract_placeholders",
    "list_templates",
    "load_template",
    "load_templates",
    "render",
    "render_all",
    "lookup_path",
    "parse_path",
]
