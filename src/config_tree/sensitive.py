"""
Masking of secret-looking settings before they reach the logs.

Setting keys are dotted paths (``db.password``, ``api["token"]``); a key is
sensitive when any of its segments matches.
"""
import os
import re
from typing import Any, Dict, Mapping

from .constants import ENV_LOG_MASK

REDACTED = '[REDACTED]'

SENSITIVE_SEGMENT_PATTERNS = [
    re.compile(r'KEY', re.IGNORECASE),
    re.compile(r'SECRET', re.IGNORECASE),
    re.compile(r'PASSWORD', re.IGNORECASE),
    re.compile(r'^PASS$|_PASS$', re.IGNORECASE),
    re.compile(r'TOKEN', re.IGNORECASE),
    re.compile(r'CREDENTIAL', re.IGNORECASE),
    re.compile(r'PRIVATE', re.IGNORECASE),
]

# JWTs, API keys, auth headers and PEM blocks
SENSITIVE_VALUE_PREFIXES = ('sk-', 'pk-', 'Bearer ', 'Basic ', 'eyJ', '-----BEGIN')

_log_mask = os.getenv(ENV_LOG_MASK, '').lower() != 'false'


def set_log_mask(enabled: bool) -> None:
    global _log_mask
    _log_mask = enabled


def is_sensitive_key(key: str) -> bool:
    segments = re.split(r'[.\[\]"\']+', key)
    return any(p.search(s) for s in segments if s for p in SENSITIVE_SEGMENT_PATTERNS)


def is_sensitive_value(value: str) -> bool:
    return bool(value) and value.startswith(SENSITIVE_VALUE_PREFIXES)


def mask_value(key: str, value: Any) -> str:
    text = str(value)
    if _log_mask and text and (is_sensitive_key(key) or is_sensitive_value(text)):
        return REDACTED
    return text


def mask_settings(flat: Mapping[str, Any]) -> Dict[str, str]:
    """Dotted-key settings with every sensitive value replaced."""
    return {key: mask_value(key, value) for key, value in flat.items()}
