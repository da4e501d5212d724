from typing import Any, Mapping
import datetime
import json


def thaw(value: Any) -> Any:
    """Turn read-only settings views back into plain dicts and lists."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return value


def coerce_to_string(value: Any) -> str:
    """Convert a settings value to its rendered text."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(thaw(value), sort_keys=True, default=str)
    return str(value)
