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
Models describing the image derived from a package and the Dockerfile built for it.
"""
from typing import List
from pydantic import BaseModel, Field

SUPERVISOR_PORT = "9631"


class ImageMetadata(BaseModel):
    """
    Metadata derived from the primary package's installed files.
    """
    name: str
    version_tag: str
    latest_tag: str
    exposes: List[str] = []


class BuildDescriptor(BaseModel):
    """
    The declarative content of a generated Dockerfile, field by field in the
    order the instructions are written.
    """
    base_image: str = "scratch"
    environment: str
    working_directory: str = "/"
    copy_source: str = "rootfs"
    copy_target: str = "/"
    volumes: List[str] = []
    exposed_ports: List[str] = Field(default_factory=lambda: [SUPERVISOR_PORT])
    entrypoint: List[str] = ["/init.sh"]
    cmd: List[str] = []

    @classmethod
    def for_package(cls,
                    primary: str,
                    metadata: ImageMetadata,
                    path_env: str,
                    bldr_root: str = "/opt/bldr",
                    supervisor_port: str = SUPERVISOR_PORT) -> "BuildDescriptor":
        """
        Assemble the descriptor for a package image.

        :param primary: The primary package identifier, exactly as the caller gave it.
        :param metadata: Metadata derived from the materialized root filesystem.
        :param path_env: The PATH assignment from the root filesystem's init.sh.
        :param bldr_root: Root of the package tree inside the image.
        :param supervisor_port: Port the supervisor always listens on.
        """
        svc_root = f"{bldr_root.rstrip('/')}/svc/{metadata.name}"
        ports = [str(supervisor_port)]
        for port in metadata.exposes:
            if port not in ports:
                ports.append(port)
        return cls(
            environment=path_env,
            volumes=[f"{svc_root}/data", f"{svc_root}/config"],
            exposed_ports=ports,
            cmd=["start", primary],
        )
