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
The environment a native build runs with, derived from installed packages.
"""
import json
import os
from typing import Dict, List, MutableMapping, Optional
from pydantic import BaseModel, Field


class BuildEnvironment(BaseModel):
    """
    Variables to set and directories to prepend to path-like variables.

    Nothing here touches the process environment until the caller asks
    for it with apply().
    """
    variables: Dict[str, str] = {}
    path_prepends: Dict[str, List[str]] = {}
    path_separator: str = Field(default_factory=lambda: os.pathsep)
    toolchain_version: Optional[str] = None

    def prepend(self, variable: str, directory: str):
        """
        Queue a directory to be prepended to a path-like variable.
        Directories keep the order they were queued in; repeats are ignored.
        """
        entries = self.path_prepends.setdefault(variable, [])
        if directory not in entries:
            entries.append(directory)

    def render(self, base_env: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """
        Compute the resulting environment on top of base_env.

        :param base_env: The environment to start from. Defaults to empty.
        :return: A new dictionary; base_env is left unchanged.
        """
        env = dict(base_env or {})
        env.update(self.variables)
        for variable, directories in self.path_prepends.items():
            if not directories:
                continue
            value = self.path_separator.join(directories)
            existing = env.get(variable)
            if existing:
                value = f"{value}{self.path_separator}{existing}"
            env[variable] = value
        return env

    def exported(self, base_env: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """
        Only the variables this environment sets, with path-like variables
        rendered against base_env.
        """
        rendered = self.render(base_env)
        names = list(self.variables) + [v for v in self.path_prepends if v not in self.variables]
        return {name: rendered[name] for name in names if name in rendered}

    def apply(self, environ: Optional[MutableMapping[str, str]] = None) -> MutableMapping[str, str]:
        """
        Write the rendered environment into environ (os.environ by default).
        """
        if environ is None:
            environ = os.environ
        for key, value in self.exported(dict(environ)).items():
            environ[key] = value
        return environ

    def as_shell(self, dialect: str = "posix", base_env: Optional[Dict[str, str]] = None) -> str:
        """
        Render the exported variables as shell statements.

        The toolchain version, when known, is a leading comment in the shell
        dialects and a top-level "toolchain_version" key in json, next to
        "environment".

        :param dialect: 'posix', 'powershell' or 'json'.
        :param base_env: Environment that path-like variables are prepended to.
        """
        exported = self.exported(base_env)
        if dialect == "json":
            payload = {"environment": exported, "toolchain_version": self.toolchain_version}
            return json.dumps(payload, indent=2, sort_keys=True)
        if dialect not in ("posix", "powershell"):
            raise ValueError(f"Unknown shell dialect: {dialect}")

        lines = []
        if self.toolchain_version:
            lines.append(f"# toolchain_version: {self.toolchain_version}")
        for key in sorted(exported):
            if dialect == "powershell":
                value = exported[key].replace('"', '`"')
                lines.append(f'$env:{key}="{value}"')
            else:
                value = exported[key].replace('"', '\\"')
                lines.append(f'export {key}="{value}"')
        return "\n".join(lines)
