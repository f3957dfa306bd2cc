"""Unit tests for staging sessions and per-caller admission control."""

from pathlib import Path

import pytest

from sticker_conformer.domain.exceptions import CallerBusyError
from sticker_conformer.services.admission_service import AdmissionRegistry
from sticker_conformer.services.staging_service import StagingSession


class TestStagingSession:
    def test_creates_staging_dir(self, tmp_path: Path):
        staging = tmp_path / "staging"

        StagingSession(staging)

        assert staging.is_dir()

    def test_path_for_is_namespaced(self, tmp_path: Path):
        session = StagingSession(tmp_path, caller_id="42")

        path = session.path_for("Input.GIF")

        assert path.parent == tmp_path.resolve()
        assert path.name.startswith(session.prefix + "_")
        assert path.name.endswith("_Input.gif")
        assert "_42_" in session.prefix

    def test_unsafe_caller_id_is_sanitized(self, tmp_path: Path):
        session = StagingSession(tmp_path, caller_id="../../etc/passwd")

        path = session.path_for("../x.gif")

        assert path.parent == tmp_path.resolve()
        assert "/" not in session.prefix

    def test_sessions_do_not_collide(self, tmp_path: Path):
        first = StagingSession(tmp_path, caller_id="same")
        second = StagingSession(tmp_path, caller_id="same")

        assert first.prefix != second.prefix

    def test_cleanup_only_touches_own_files(self, tmp_path: Path):
        mine = StagingSession(tmp_path, caller_id="a")
        theirs = StagingSession(tmp_path, caller_id="b")
        mine.path_for("input.gif").write_bytes(b"1")
        mine.path_for("output_tier1.webm").write_bytes(b"2")
        their_file = theirs.path_for("input.gif")
        their_file.write_bytes(b"3")
        unrelated = tmp_path / "keep.txt"
        unrelated.write_text("x")

        mine.cleanup()

        assert mine.owned_files() == []
        assert their_file.exists()
        assert unrelated.exists()

    def test_context_manager_cleans_up_on_error(self, tmp_path: Path):
        with pytest.raises(RuntimeError):
            with StagingSession(tmp_path) as session:
                session.path_for("input.gif").write_bytes(b"1")
                raise RuntimeError("boom")

        assert list(tmp_path.iterdir()) == []


class TestAdmissionRegistry:
    def test_acquire_and_release(self):
        registry = AdmissionRegistry()

        assert registry.try_acquire("u1")
        assert registry.is_busy("u1")
        assert not registry.try_acquire("u1")

        registry.release("u1")

        assert not registry.is_busy("u1")
        assert registry.try_acquire("u1")

    def test_callers_are_independent(self):
        registry = AdmissionRegistry()

        assert registry.try_acquire("u1")
        assert registry.try_acquire("u2")

    def test_admit_rejects_busy_caller(self):
        registry = AdmissionRegistry()

        with registry.admit("u1"):
            with pytest.raises(CallerBusyError):
                with registry.admit("u1"):
                    pass
            assert registry.is_busy("u1")

        assert not registry.is_busy("u1")

    def test_admit_releases_on_error(self):
        registry = AdmissionRegistry()

        with pytest.raises(ValueError):
            with registry.admit("u1"):
                raise ValueError("conversion failed")

        assert not registry.is_busy("u1")

    def test_release_unknown_caller_is_noop(self):
        AdmissionRegistry().release("nobody")
