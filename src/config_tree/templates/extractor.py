from typing import List, Dict, Any
from .patterns import PATTERNS


def extract_placeholders(template: str) -> List[Dict[str, Any]]:
    """Extract all placeholders from a template string."""
    placeholders = []

    for match in PATTERNS["PLACEHOLDER"].finditer(template):
        placeholders.append({
            "raw": match.group(0),
            "path": match.group(1).strip(),
            "start": match.start(),
            "end": match.end(),
            "line": template.count("\n", 0, match.start()) + 1,
        })

    return placeholders
