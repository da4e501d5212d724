import re

PATTERNS = {
    # ${path.to.value} or ${list[0]} or ${map["dotted.key"]}
    "PLACEHOLDER": re.compile(r'\$\{([^{}]*)\}'),
}
