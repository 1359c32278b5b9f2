import pytest

from common.errors import SnapshotWriteFailure, SourceUnavailable
from storage.snapshot_store import FileSnapshotStore


def test_missing_snapshot_reads_as_none(tmp_path):
    assert FileSnapshotStore(tmp_path / "nope.txt").read() is None


def test_write_then_read_preserves_exact_text(tmp_path):
    store = FileSnapshotStore(tmp_path / "nested" / "dir" / "latest.txt")
    raw = "<html>\r\n<h3 id='a'>ü</h3>\r\n</html>"

    store.write(raw)

    assert store.read() == raw
    assert store.path.read_bytes() == raw.encode("utf-8")


def test_write_replaces_and_leaves_no_temp_files(tmp_path):
    store = FileSnapshotStore(tmp_path / "latest.txt")
    store.write("first")
    store.write("second")

    assert store.read() == "second"
    assert [p.name for p in tmp_path.iterdir()] == ["latest.txt"]


def test_unreadable_snapshot_is_source_unavailable(tmp_path):
    directory = tmp_path / "is_a_dir"
    directory.mkdir()

    with pytest.raises(SourceUnavailable):
        FileSnapshotStore(directory).read()


def test_unwritable_snapshot_is_snapshot_write_failure(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file in the way")
    store = FileSnapshotStore(blocker / "latest.txt")

    with pytest.raises(SnapshotWriteFailure) as exc:
        store.write("<html></html>")

    assert exc.value.context["stage"] == "snapshot_write"
