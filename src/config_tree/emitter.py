import logging
import os
from pathlib import Path
from typing import Iterable, List

from .domain import RenderedArtifact
from .errors import SyncError

logger = logging.getLogger(__name__)


def emit(artifacts: Iterable[RenderedArtifact], dest_dir: str) -> List[Path]:
    """Write each artifact to dest_dir/<name>, replacing existing files."""
    dest = Path(dest_dir)
    dest.mkdir(parents=True, exist_ok=True)
    root = dest.resolve()

    written = []
    for artifact in artifacts:
        target = (dest / artifact.name).resolve()
        if root not in target.parents:
            raise SyncError(str(target), f"outside of {dest_dir}", template=artifact.name)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(artifact.content)
        logger.info(f"Wrote {target}")
        written.append(target)
    return written
