import os
import time

from media_gateway.media.storage import ScratchStorage


def test_allocate_namespaces_paths_by_identifier(storage):
    job = storage.allocate("holiday clip.MOV", "webm")

    assert job.input_path.parent == storage.root
    assert job.output_path.parent == storage.root
    assert job.input_path.name == f"{job.identifier}_input.MOV"
    assert job.output_path.name == f"{job.identifier}_output.webm"
    assert job.input_path != job.output_path
    assert job.codec == "libvpx"


def test_allocate_without_extension(storage):
    job = storage.allocate("recording", "mp4")

    assert job.input_path.name == f"{job.identifier}_input"
    assert job.codec == "libx264"


def test_allocate_drops_unsafe_extensions(storage):
    for name in ("bad.m\x00v", "clip.m p4", "clip.\u00e9t\u00e9", "clip." + "x" * 17, "../../etc/passwd"):
        job = storage.allocate(name, "mp4")
        assert job.input_path.name == f"{job.identifier}_input"
        assert job.input_path.parent == storage.root


def test_allocate_never_reuses_identifiers(storage):
    identifiers = {storage.allocate("a.mp4", "mp4").identifier for _ in range(500)}
    assert len(identifiers) == 500


def test_allocate_creates_no_files(storage):
    storage.allocate("a.mp4", "mp4")
    assert list(storage.root.iterdir()) == []


def test_resolve_artifact_accepts_generated_names(storage):
    job = storage.allocate("a.mp4", "mp4")
    assert storage.resolve_artifact(job.output_path.name) == job.output_path


def test_resolve_artifact_rejects_other_names(storage):
    identifier = "0" * 32
    assert storage.resolve_artifact("abc_output.mp4") is None
    assert storage.resolve_artifact(f"{identifier}_input.mp4") is None
    assert storage.resolve_artifact(f"../{identifier}_output.mp4") is None
    assert storage.resolve_artifact(f"{identifier}_output.mp4/../../etc") is None
    assert storage.resolve_artifact("") is None
    assert storage.resolve_artifact(f"{identifier}_output.mp4\n") is None


def test_cleanup_tolerates_missing_file(storage):
    path = storage.root / "gone.mp4"
    ScratchStorage.cleanup(path)

    path.write_bytes(b"data")
    ScratchStorage.cleanup(path)
    assert not path.exists()


def _age(path, seconds):
    then = time.time() - seconds
    os.utime(path, (then, then))


def test_sweep_expired_removes_only_old_artifacts(storage):
    old = storage.root / f"{'a' * 32}_output.mp4"
    fresh = storage.root / f"{'b' * 32}_output.mp4"
    stray = storage.root / "notes.txt"
    for path in (old, fresh, stray):
        path.write_bytes(b"data")
    _age(old, 7200)
    _age(stray, 7200)

    removed = storage.sweep_expired(3600)

    assert removed == 1
    assert not old.exists()
    assert fresh.exists()
    assert stray.exists()


def test_sweep_expired_spares_inputs_of_running_jobs(storage):
    job = storage.allocate("clip.mov", "mp4")
    job.input_path.write_bytes(b"raw")
    _age(job.input_path, 7200)

    assert storage.sweep_expired(3600) == 0
    assert job.input_path.exists()

    assert storage.sweep_expired(3600, include_inputs=True) == 1
    assert not job.input_path.exists()


def test_sweep_expired_missing_root(tmp_path):
    assert ScratchStorage(tmp_path / "never-created").sweep_expired(60) == 0
