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
Execution of external commands with fail-fast error reporting.
"""
import logging
import shlex
import shutil
import subprocess
from typing import Dict, List, Optional
from ..errors import CommandError, ToolNotFoundError

logger = logging.getLogger(__name__)


class CommandRunner:
    """
    Runs external programs and raises on the first failure.
    """
    def __init__(self, trace: bool = False):
        """
        Initializes the command runner.

        Args:
            trace (bool): Log each command before running it, like `set -x`.
        """
        self.trace = trace

    def require(self, tool: str) -> str:
        """
        Locates a required program.

        Args:
            tool (str): Program name or path.

        Returns:
            str: Absolute path to the program.

        Raises:
            ToolNotFoundError: If the program cannot be found.
        """
        path = shutil.which(tool)
        if path is None:
            raise ToolNotFoundError(tool)
        return path

    def run(self,
            command: List[str],
            env: Optional[Dict[str, str]] = None,
            cwd: Optional[str] = None,
            capture: bool = False) -> subprocess.CompletedProcess:
        """
        Runs a command to completion.

        Args:
            command (List[str]): Command and arguments to execute.
            env (Optional[Dict[str, str]]): Full environment for the process.
                Defaults to the current environment.
            cwd (Optional[str]): Directory to run in.
            capture (bool): Capture stdout/stderr as text instead of inheriting them.

        Returns:
            subprocess.CompletedProcess: The finished process.

        Raises:
            CommandError: If the command exits nonzero.
            ToolNotFoundError: If the program does not exist.
        """
        if self.trace:
            logger.debug("+ %s", shlex.join(command))

        try:
            result = subprocess.run(
                command,
                env=env,
                cwd=cwd,
                capture_output=capture,
                text=True,
                shell=False,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(command[0]) from e

        if result.returncode != 0:
            raise CommandError(command, result.returncode, result.stderr if capture else None)
        return result
