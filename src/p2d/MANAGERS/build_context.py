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
Temporary build contexts for image synthesis.
"""
import logging
import os
import shutil
import tempfile
from typing import Optional

logger = logging.getLogger(__name__)


class BuildContext:
    """
    A freshly created directory holding a root filesystem and a Dockerfile.

    Use as a context manager; the directory is removed on exit whether or not
    the body raised, unless keep is set.
    """
    def __init__(self, prefix: str = "p2d", keep: bool = False, base_dir: Optional[str] = None):
        """
        Initializes the build context.

        :param prefix: Prefix for the directory name.
        :param keep: Leave the directory in place on exit.
        :param base_dir: Parent directory. Defaults to the system temp directory.
        """
        self.prefix = prefix
        self.keep = keep
        self.base_dir = base_dir
        self.path: Optional[str] = None

    @property
    def rootfs(self) -> str:
        return os.path.join(self._require_path(), "rootfs")

    @property
    def dockerfile(self) -> str:
        return os.path.join(self._require_path(), "Dockerfile")

    def _require_path(self) -> str:
        if self.path is None:
            raise RuntimeError("Build context has not been created")
        return self.path

    def create(self) -> str:
        self.path = tempfile.mkdtemp(prefix=f"{self.prefix}-", dir=self.base_dir)
        try:
            os.makedirs(self.rootfs, exist_ok=True)
        except OSError:
            self.remove()
            raise
        logger.debug("Created build context %s", self.path)
        return self.path

    def remove(self):
        if self.path and os.path.exists(self.path):
            shutil.rmtree(self.path)
            logger.debug("Removed build context %s", self.path)

    def __enter__(self) -> "BuildContext":
        self.create()
        return self

    def __exit__(self, exc_type, exc, tb):
        if self.keep:
            logger.info("Keeping build context %s", self.path)
        else:
            self.remove()
        return False
