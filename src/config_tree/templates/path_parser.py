from typing import List, NamedTuple


class Segment(NamedTuple):
    text: str
    # Bracketed segments are matched as a single key and never joined with neighbours
    bracketed: bool = False


def parse_path(path: str) -> List[Segment]:
    """
    Parse a placeholder path into segments.
    Supports dot notation (a.b.c) and bracket notation (a['b.c'][0]).
    """
    path = path.strip()
    if not path:
        raise ValueError("empty placeholder")

    # If simple dot path, split
    if '[' not in path and '"' not in path and "'" not in path:
        segments = path.split('.')
        if not all(segments):
            raise ValueError(f"empty segment in '{path}'")
        return [Segment(s) for s in segments]

    segments = []
    current = ""
    in_bracket = False
    in_quote = False
    quote_char = None

    for char in path:
        if in_quote:
            if char == quote_char:
                in_quote = False
                quote_char = None
                segments.append(Segment(current, True))
                current = ""
            else:
                current += char
        elif in_bracket:
            if char == '"' or char == "'":
                in_quote = True
                quote_char = char
            elif char == ']':
                in_bracket = False
                if current:  # numeric index
                    segments.append(Segment(current.strip(), True))
                    current = ""
            else:
                current += char
        else:
            if char == '.':
                if current:
                    segments.append(Segment(current))
                    current = ""
            elif char == '[':
                if current:
                    segments.append(Segment(current))
                    current = ""
                in_bracket = True
            else:
                current += char

    if in_bracket or in_quote:
        raise ValueError(f"unterminated bracket in '{path}'")
    if current:
        segments.append(Segment(current))

    return segments
