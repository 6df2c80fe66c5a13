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
Habitat command-line implementations of the package manager and the
base-image tool.
"""
import logging
import os
from typing import Dict, List, Optional, Sequence
from ..errors import PackageIdentError
from ..MODELS.package_ident import PackageIdent
from ..RUNNERS.command_runner import CommandRunner

logger = logging.getLogger(__name__)


class HabPackageManager:
    """
    Package manager backed by `hab pkg`.
    """
    def __init__(self, runner: CommandRunner, hab_cmd: str = "hab",
                 env: Optional[Dict[str, str]] = None):
        """
        :param runner: Runner used for every hab invocation.
        :param hab_cmd: The hab program.
        :param env: Extra environment for hab, e.g. HAB_LICENSE.
        """
        self.runner = runner
        self.hab_cmd = hab_cmd
        self.env = env or {}

    def _run(self, *args: str, capture: bool = False):
        env = dict(os.environ)
        env.update(self.env)
        return self.runner.run([self.hab_cmd, "pkg", *args], env=env, capture=capture)

    def list_installed(self, ident: PackageIdent) -> List[PackageIdent]:
        result = self._run("list", str(ident), capture=True)
        installed = []
        for line in result.stdout.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                installed.append(PackageIdent.parse(line))
            except PackageIdentError:
                logger.debug("Ignoring unexpected line from hab pkg list: %s", line)
        return installed

    def install(self, ident: PackageIdent) -> None:
        self._run("install", str(ident))

    def resolve_path(self, ident: PackageIdent) -> str:
        result = self._run("path", str(ident), capture=True)
        return result.stdout.strip()


class HabStudioMaterializer:
    """
    Base-image tool backed by `hab-studio -t baseimage new`.
    """
    def __init__(self, runner: CommandRunner, studio_cmd: str = "hab-studio"):
        self.runner = runner
        self.studio_cmd = studio_cmd

    def materialize(self, packages: Sequence[str], rootfs: str) -> None:
        """
        Creates a base image root filesystem containing packages.

        :param packages: Every package identifier to lay out.
        :param rootfs: Target root directory.
        """
        env = dict(os.environ)
        env["PKGS"] = " ".join(packages)
        env["NO_MOUNT"] = "1"
        self.runner.run([self.studio_cmd, "-r", rootfs, "-t", "baseimage", "new"], env=env)
