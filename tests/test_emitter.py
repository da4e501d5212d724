import pytest

from config_tree.domain import RenderedArtifact
from config_tree.emitter import emit
from config_tree.errors import SyncError


def test_writes_nested_files(tmp_path):
    dest = tmp_path / "out"
    artifacts = [
        RenderedArtifact("conn.txt", b"db1:5432"),
        RenderedArtifact("nested/feature.properties", b"feature.enabled=true\n"),
    ]

    written = emit(artifacts, str(dest))

    assert len(written) == 2
    assert (dest / "conn.txt").read_bytes() == b"db1:5432"
    assert (dest / "nested" / "feature.properties").read_bytes() == b"feature.enabled=true\n"


def test_replaces_existing_files(tmp_path):
    (tmp_path / "conn.txt").write_bytes(b"old")
    emit([RenderedArtifact("conn.txt", b"new")], str(tmp_path))
    assert (tmp_path / "conn.txt").read_bytes() == b"new"


def test_rejects_paths_outside_destination(tmp_path):
    dest = tmp_path / "out"
    with pytest.raises(SyncError) as exc_info:
        emit([RenderedArtifact("../escape", b"x")], str(dest))
    assert exc_info.value.template == "../escape"
    assert not (tmp_path / "escape").exists()
