"""
Shared fakes for the external tools p2d drives.
"""
import os
import pytest
from p2d.config import Settings
from p2d.errors import CommandError
from p2d.MODELS.package_ident import PackageIdent

INIT_SH = """#!/bin/busybox sh
export PATH=/opt/bldr/pkgs/core/busybox-static/1.24.2/20160708162350/bin
exec /opt/bldr/pkgs/core/hab-sup/0.9.0/20160815225003/bin/hab-sup "$@"
"""


class FakeMaterializer:
    """Lays out a minimal package tree the way the base-image tool does."""

    def __init__(self, idents=None, exposes=None, bldr_root="/opt/bldr", fail=False):
        # ident string as requested -> fully qualified ident written to IDENT
        self.idents = idents or {}
        # ident string as requested -> EXPOSES file content
        self.exposes = exposes or {}
        self.bldr_root = bldr_root
        self.fail = fail
        self.calls = []

    def materialize(self, packages, rootfs):
        self.calls.append((list(packages), rootfs))
        if self.fail:
            raise CommandError(["hab-studio", "-r", rootfs], 2)

        with open(os.path.join(rootfs, "init.sh"), "w") as f:
            f.write(INIT_SH)

        for pkg in packages:
            full = self.idents.get(pkg, pkg)
            relative = full.split("/")[len(pkg.split("/")):]
            pkg_dir = os.path.join(rootfs, self.bldr_root.strip("/"), "pkgs", *pkg.split("/"), *relative)
            os.makedirs(pkg_dir, exist_ok=True)
            with open(os.path.join(pkg_dir, "IDENT"), "w") as f:
                f.write(full + "\n")
            if pkg in self.exposes:
                with open(os.path.join(pkg_dir, "EXPOSES"), "w") as f:
                    f.write(self.exposes[pkg])


class RecordingBuilder:
    """Records build and tag calls, capturing the Dockerfile at build time."""

    def __init__(self, fail_code=0):
        self.fail_code = fail_code
        self.builds = []
        self.tags = []
        self.dockerfile = None
        self.context_dir = None

    def build(self, context_dir, tag):
        self.context_dir = context_dir
        with open(os.path.join(context_dir, "Dockerfile")) as f:
            self.dockerfile = f.read()
        self.builds.append(tag)
        if self.fail_code:
            raise CommandError(["docker", "build", "-t", tag, "."], self.fail_code)

    def tag(self, source, target):
        self.tags.append((source, target))


class FakePackageManager:
    """In-memory package manager."""

    def __init__(self, installed=None, root="/hab/pkgs", fail_on=None):
        self.installed = [PackageIdent.parse(i) for i in (installed or [])]
        self.root = root
        self.fail_on = fail_on
        self.install_calls = []
        self.list_calls = []

    def list_installed(self, ident):
        self.list_calls.append(str(ident))
        return [i for i in self.installed if ident.matches(i)]

    def install(self, ident):
        self.install_calls.append(str(ident))
        if self.fail_on == str(ident):
            raise CommandError(["hab", "pkg", "install", str(ident)], 1)
        self.installed.append(PackageIdent(origin=ident.origin, name=ident.name,
                                           version=ident.version or "1.0.0",
                                           release=ident.release or "20200101000000"))

    def resolve_path(self, ident):
        return f"{self.root}/{ident.origin}/{ident.name}"


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def materializer():
    return FakeMaterializer(idents={"acme/widget": "acme/widget/1.2.0/20200101000000"})


@pytest.fixture
def builder():
    return RecordingBuilder()


@pytest.fixture(autouse=True)
def reset_p2d_logger():
    """Undo configure_logging() so handlers never outlive the stream they wrap."""
    yield
    import logging
    logger = logging.getLogger("p2d")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
