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
Runtime settings read from the process environment and an optional .env file.
"""
import os
from typing import Dict, Mapping, Optional
from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel

DEFAULT_BLDR_ROOT = "/opt/bldr"


class Settings(BaseModel):
    """
    Settings shared by the p2d commands.
    """
    bldr_root: str = DEFAULT_BLDR_ROOT
    debug: bool = False
    hab_cmd: str = "hab"
    studio_cmd: str = "hab-studio"
    docker_cmd: str = "docker"
    supervisor_port: int = 9631
    keep_context: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 dotenv_path: Optional[str] = None) -> "Settings":
        """
        Build settings from environment variables.

        Values from a .env file fill in anything the environment leaves unset.

        :param environ: Environment to read. Defaults to os.environ.
        :param dotenv_path: Explicit .env file. Defaults to the nearest .env found
            from the current directory upwards, if any.
        """
        env: Dict[str, str] = {}
        if dotenv_path is None:
            dotenv_path = find_dotenv(usecwd=True)
        if dotenv_path and os.path.exists(dotenv_path):
            env.update({k: v for k, v in dotenv_values(dotenv_path).items() if v is not None})
        env.update(os.environ if environ is None else environ)

        return cls(
            bldr_root=env.get("BLDR_ROOT") or DEFAULT_BLDR_ROOT,
            # Any non-empty DEBUG turns on command tracing
            debug=bool(env.get("DEBUG")),
            hab_cmd=env.get("P2D_HAB") or "hab",
            studio_cmd=env.get("P2D_STUDIO") or "hab-studio",
            docker_cmd=env.get("P2D_DOCKER") or "docker",
            keep_context=bool(env.get("P2D_KEEP_CONTEXT")),
        )
