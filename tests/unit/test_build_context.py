import os
import pytest
from p2d.MANAGERS import build_context
from p2d.MANAGERS.build_context import BuildContext


class TestBuildContext:
    """Tests for BuildContext."""

    def test_creates_rootfs(self, tmp_path):
        with BuildContext(prefix="p2d", base_dir=str(tmp_path)) as ctx:
            assert os.path.isdir(ctx.rootfs)
            assert os.path.basename(ctx.path).startswith("p2d-")
        assert not os.path.exists(ctx.path)

    def test_removed_when_body_raises(self, tmp_path):
        with pytest.raises(RuntimeError):
            with BuildContext(base_dir=str(tmp_path)) as ctx:
                raise RuntimeError("build failed")
        assert not os.path.exists(ctx.path)

    def test_removed_when_rootfs_creation_fails(self, tmp_path, monkeypatch):
        def failing_makedirs(path, exist_ok=False):
            raise OSError("disk full")

        monkeypatch.setattr(build_context.os, "makedirs", failing_makedirs)
        with pytest.raises(OSError):
            with BuildContext(base_dir=str(tmp_path)):
                pass
        assert os.listdir(tmp_path) == []

    def test_keep(self, tmp_path):
        with BuildContext(base_dir=str(tmp_path), keep=True) as ctx:
            pass
        assert os.path.isdir(ctx.rootfs)

    def test_paths_require_create(self):
        with pytest.raises(RuntimeError):
            BuildContext().rootfs
