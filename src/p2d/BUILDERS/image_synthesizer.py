# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Synthesis of container images from installed packages.
"""
import logging
import os
from typing import List, Optional, Sequence
from ..config import Settings
from ..errors import MetadataError
from ..MANAGERS.build_context import BuildContext
from ..MODELS.image_metadata import BuildDescriptor, ImageMetadata
from ..MODELS.package_ident import PackageIdent
from ..PARSERS.package_files import find_package_file, read_exposes, read_init_path
from ..TOOLS.interfaces import BaseImageMaterializer, ImageBuilder
from .dockerfile_renderer import DockerfileRenderer

logger = logging.getLogger(__name__)

PKG_MARKER = ".hab_pkg"


class ImageSynthesizer:
    """
    Builds a container image for a primary package.

    The steps run strictly in order: create the build context, materialize the
    root filesystem, derive metadata, write the Dockerfile, build, tag, and
    remove the context. Any failure aborts the remaining steps.
    """
    def __init__(self,
                 materializer: BaseImageMaterializer,
                 builder: ImageBuilder,
                 settings: Optional[Settings] = None,
                 program: str = "p2d"):
        """
        Initializes the ImageSynthesizer.

        :param materializer: Lays out packages into the root filesystem.
        :param builder: Builds and tags the image.
        :param settings: Runtime settings; bldr_root and supervisor_port are used.
        :param program: Prefix for the temporary build context name.
        """
        self.materializer = materializer
        self.builder = builder
        self.settings = settings or Settings()
        self.program = program
        self.renderer = DockerfileRenderer()

    def synthesize(self, primary: str, all_packages: Optional[Sequence[str]] = None) -> ImageMetadata:
        """
        Builds and tags the image for primary.

        :param primary: Package whose metadata names the image and whose
            identifier the container starts, exactly as given.
        :param all_packages: Every package to place in the image. Defaults to
            [primary]; primary is prepended when missing.
        :return: The metadata the image was tagged with.
        """
        PackageIdent.parse(primary)
        packages: List[str] = list(all_packages) if all_packages else [primary]
        if primary not in packages:
            packages.insert(0, primary)

        with BuildContext(prefix=self.program, keep=self.settings.keep_context) as ctx:
            logger.debug("Build context ready at %s", ctx.path)

            self.materializer.materialize(packages, ctx.rootfs)
            with open(os.path.join(ctx.rootfs, PKG_MARKER), "w") as f:
                f.write(f"{primary}\n")
            logger.debug("Materialized root filesystem for %s", ", ".join(packages))

            metadata = self.derive_metadata(ctx.rootfs, primary)
            logger.debug("Derived metadata: %s", metadata)

            descriptor = BuildDescriptor.for_package(
                primary,
                metadata,
                read_init_path(os.path.join(ctx.rootfs, "init.sh")),
                bldr_root=self.settings.bldr_root,
                supervisor_port=str(self.settings.supervisor_port),
            )
            self.renderer.write(descriptor, ctx.path)
            logger.debug("Wrote %s", ctx.dockerfile)

            logger.info("Building %s", metadata.version_tag)
            self.builder.build(ctx.path, metadata.version_tag)
            logger.debug("Built %s", metadata.version_tag)

            self.builder.tag(metadata.version_tag, metadata.latest_tag)
            logger.debug("Tagged %s", metadata.latest_tag)

        return metadata

    def package_root(self, rootfs: str, primary: str) -> str:
        """Directory holding primary's installed files inside rootfs."""
        bldr_root = self.settings.bldr_root.strip("/")
        return os.path.join(rootfs, bldr_root, "pkgs", *primary.split("/"))

    def derive_metadata(self, rootfs: str, primary: str) -> ImageMetadata:
        """
        Reads IDENT and EXPOSES for primary from the materialized tree.

        :param rootfs: The materialized root filesystem.
        :param primary: The primary package identifier.
        :raises MetadataError: If the package has no IDENT file.
        """
        pkg_root = self.package_root(rootfs, primary)
        ident_file = find_package_file(pkg_root, "IDENT")
        if ident_file is None:
            raise MetadataError(f"No IDENT file for {primary} under {pkg_root}")

        installed = PackageIdent.from_ident_file(ident_file)
        return ImageMetadata(
            name=PackageIdent.parse(primary).name,
            version_tag=installed.version_tag,
            latest_tag=installed.latest_tag,
            exposes=read_exposes(find_package_file(pkg_root, "EXPOSES")),
        )
