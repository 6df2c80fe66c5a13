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
Configuration for the build environment initializer.
"""
import os
from typing import Dict, List, Optional
import yaml
from pydantic import BaseModel, ValidationError
from ..errors import ConfigError

DEFAULT_PACKAGES = [
    "core/libarchive",
    "core/libsodium",
    "core/openssl",
    "core/xz",
    "core/zeromq",
    "core/protobuf",
    "core/cacerts",
    "core/visual-cpp-redist-2015",
    "core/visual-cpp-build-tools-2015",
]

DEFAULT_ROLES = {
    "libarchive": "core/libarchive",
    "openssl": "core/openssl",
    "zeromq": "core/zeromq",
    "cacerts": "core/cacerts",
}


class InitializerConfig(BaseModel):
    """
    Which packages a native build needs and which of them provide the
    libraries the build locates through dedicated variables.
    """
    packages: List[str] = DEFAULT_PACKAGES
    roles: Dict[str, str] = DEFAULT_ROLES
    hab_license: str = "accept-no-persist"
    openssl_libs: str = "ssleay32:libeay32"
    openssl_static: bool = True
    toolchain_file: Optional[str] = "rust-toolchain"
    path_separator: Optional[str] = None
    base_dir: str = "."

    @classmethod
    def load(cls, path: str) -> "InitializerConfig":
        """
        Loads a YAML configuration file.

        Relative paths inside the file (toolchain_file) are resolved against
        the file's directory.

        :param path: Path to the YAML file.
        :return: Parsed configuration.
        """
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a mapping at the top level, got {type(data).__name__}")
        data.setdefault("base_dir", os.path.dirname(os.path.abspath(path)))
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"{path}: {e}") from e

    @property
    def toolchain_path(self) -> Optional[str]:
        if not self.toolchain_file:
            return None
        return os.path.join(self.base_dir, self.toolchain_file)
