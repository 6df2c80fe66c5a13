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
Narrow interfaces to the external tools p2d drives.

Procedures depend on these protocols only, so tests can substitute fakes for
the package manager, the base-image tool and the container engine.
"""
from typing import List, Protocol, Sequence
from ..MODELS.package_ident import PackageIdent


class PackageManager(Protocol):
    """Installs packages and reports where they live."""

    def list_installed(self, ident: PackageIdent) -> List[PackageIdent]:
        """Installed packages whose identifier starts with ident."""
        ...

    def install(self, ident: PackageIdent) -> None:
        ...

    def resolve_path(self, ident: PackageIdent) -> str:
        """Install root of an installed package."""
        ...


class BaseImageMaterializer(Protocol):
    """Lays out packages' files as a root filesystem."""

    def materialize(self, packages: Sequence[str], rootfs: str) -> None:
        ...


class ImageBuilder(Protocol):
    """Builds and tags container images."""

    def build(self, context_dir: str, tag: str) -> None:
        ...

    def tag(self, source: str, target: str) -> None:
        ...
