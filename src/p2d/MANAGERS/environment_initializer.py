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
Preparation of native build environments from installed packages.
"""
import logging
import os
from typing import Dict, List, Optional, Sequence
from ..MODELS.build_environment import BuildEnvironment
from ..MODELS.initializer_config import InitializerConfig
from ..MODELS.package_ident import PackageIdent
from ..PARSERS.package_files import read_version_file
from ..TOOLS.interfaces import PackageManager

logger = logging.getLogger(__name__)


class EnvironmentInitializer:
    """
    Ensures build dependencies are installed and derives the environment
    a native compile needs from their install locations.
    """
    def __init__(self, package_manager: PackageManager, config: Optional[InitializerConfig] = None):
        """
        Initializes the environment initializer.

        :param package_manager: Used to query, install and locate packages.
        :param config: Package set and variable configuration.
        """
        self.package_manager = package_manager
        self.config = config or InitializerConfig()

    def initialize(self, packages: Optional[Sequence[str]] = None) -> BuildEnvironment:
        """
        Installs what is missing and returns the resulting build environment.

        The process environment is left alone; call apply() on the result
        to change it.

        :param packages: Package identifiers in install order. Defaults to the
            configured package list.
        :return: The derived build environment.
        :raises CommandError: If any install fails. Remaining packages are not
            attempted.
        """
        idents = [PackageIdent.parse(p) for p in (packages if packages is not None else self.config.packages)]

        for ident in idents:
            self.ensure_installed(ident)

        roots = {str(ident): self.package_manager.resolve_path(ident) for ident in idents}
        environment = self.compose(idents, roots)
        if self.config.toolchain_path:
            environment.toolchain_version = read_version_file(self.config.toolchain_path)
        return environment

    def ensure_installed(self, ident: PackageIdent) -> bool:
        """
        Installs ident unless a matching package is already present.

        :return: True if an install was issued.
        """
        installed = self.package_manager.list_installed(ident)
        if any(ident.matches(candidate) for candidate in installed):
            logger.info("%s already installed", ident)
            return False

        logger.info("Installing %s", ident)
        self.package_manager.install(ident)
        return True

    def compose(self, idents: List[PackageIdent], roots: Dict[str, str]) -> BuildEnvironment:
        """
        Builds the variable set from resolved install roots.

        :param idents: Packages in the order their directories should take precedence.
        :param roots: Install root per package identifier string.
        """
        environment = BuildEnvironment(
            path_separator=self.config.path_separator or os.pathsep,
        )
        variables = environment.variables
        variables["HAB_LICENSE"] = self.config.hab_license

        for ident in idents:
            root = roots[str(ident)]
            environment.prepend("PATH", os.path.join(root, "bin"))
            environment.prepend("LIB", os.path.join(root, "lib"))
            environment.prepend("LD_LIBRARY_PATH", os.path.join(root, "lib"))
            environment.prepend("INCLUDE", os.path.join(root, "include"))

        libarchive = self._role_root("libarchive", idents, roots)
        if libarchive:
            variables["LIBARCHIVE_INCLUDE_DIR"] = os.path.join(libarchive, "include")
            variables["LIBARCHIVE_LIB_DIR"] = os.path.join(libarchive, "lib")

        openssl = self._role_root("openssl", idents, roots)
        if openssl:
            variables["OPENSSL_LIBS"] = self.config.openssl_libs
            variables["OPENSSL_LIB_DIR"] = os.path.join(openssl, "lib")
            variables["OPENSSL_INCLUDE_DIR"] = os.path.join(openssl, "include")
            if self.config.openssl_static:
                variables["OPENSSL_STATIC"] = "true"

        zeromq = self._role_root("zeromq", idents, roots)
        if zeromq:
            variables["LIBZMQ_PREFIX"] = zeromq

        cacerts = self._role_root("cacerts", idents, roots)
        if cacerts:
            variables["SSL_CERT_FILE"] = os.path.join(cacerts, "ssl", "certs", "cacert.pem")

        return environment

    def _role_root(self, role: str, idents: List[PackageIdent], roots: Dict[str, str]) -> Optional[str]:
        """Install root of the first package filling role, if any."""
        wanted = self.config.roles.get(role)
        if not wanted:
            return None
        wanted_ident = PackageIdent.parse(wanted)
        for ident in idents:
            if wanted_ident.matches(ident) or ident.matches(wanted_ident):
                return roots[str(ident)]
        return None
