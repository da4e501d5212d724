from typing import Any, List, Mapping, Tuple

from .path_parser import Segment, parse_path

_MISSING = object()


def _dotted_run(segments: List[Segment], start: int) -> int:
    """End index of the run of plain segments starting at start."""
    if segments[start].bracketed:
        return start + 1
    end = start
    while end < len(segments) and not segments[end].bracketed:
        end += 1
    return end


def _lookup(current: Any, segments: List[Segment], index: int) -> Any:
    if index == len(segments):
        return current

    if isinstance(current, Mapping):
        # Longest literal key wins: {"db.host": x} and {"db": {"host": x}} both match db.host
        for end in range(_dotted_run(segments, index), index, -1):
            key = ".".join(s.text for s in segments[index:end])
            if key in current:
                found = _lookup(current[key], segments, end)
                if found is not _MISSING:
                    return found
        return _MISSING

    if isinstance(current, (list, tuple)):
        segment = segments[index].text
        if segment.isdigit() and int(segment) < len(current):
            return _lookup(current[int(segment)], segments, index + 1)

    return _MISSING


def lookup_path(obj: Any, path: str) -> Tuple[bool, Any]:
    """
    Resolve a value from nested settings using a path string.
    Returns (found, value) so that a missing key is distinguishable from any value.
    """
    segments = parse_path(path)
    for segment in segments:
        if segment.text.startswith("_"):
            raise ValueError(f"unsafe path segment: {segment.text}")

    value = _lookup(obj, segments, 0)
    if value is _MISSING:
        return False, None
    return True, value

