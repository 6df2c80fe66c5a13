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
Exceptions raised by p2d.
"""
from typing import List, Optional


class P2DError(Exception):
    """
    Base class for every error p2d raises on purpose.
    """
    exit_code = 1


class ToolNotFoundError(P2DError):
    """
    A required external program is not installed or not on PATH.
    """
    def __init__(self, tool: str):
        super().__init__(f"We require {tool} to continue; aborting")
        self.tool = tool


class CommandError(P2DError):
    """
    An external command exited with a nonzero status.
    """
    def __init__(self, command: List[str], returncode: int, stderr: Optional[str] = None):
        message = f"Command failed with exit code {returncode}: {' '.join(command)}"
        if stderr:
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr

    @property
    def exit_code(self) -> int:
        return self.returncode or 1


class PackageIdentError(P2DError, ValueError):
    """
    A package identifier is not of the form origin/name[/version[/release]].
    """


class MetadataError(P2DError):
    """
    A file that image metadata is derived from is missing or malformed.
    """


class ConfigError(P2DError):
    """
    A configuration file is not a mapping of known settings.
    """
