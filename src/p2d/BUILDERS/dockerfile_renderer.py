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
Renders build descriptors into Dockerfiles.
"""
import json
import os
from jinja2 import Environment
from ..MODELS.image_metadata import BuildDescriptor

DOCKERFILE_TEMPLATE = """\
FROM {{ base_image }}
ENV {{ environment }}
WORKDIR {{ working_directory }}
ADD {{ copy_source }} {{ copy_target }}
VOLUME {{ volumes | join(' ') }}
EXPOSE {{ exposed_ports | join(' ') }}
ENTRYPOINT {{ entrypoint | tojson_list }}
CMD {{ cmd | tojson_list }}
"""


class DockerfileRenderer:
    """
    Turns a BuildDescriptor into Dockerfile text.
    """

    def __init__(self):
        environment = Environment(keep_trailing_newline=True)
        environment.filters["tojson_list"] = json.dumps
        self.template = environment.from_string(DOCKERFILE_TEMPLATE)

    def render(self, descriptor: BuildDescriptor) -> str:
        """
        Renders the descriptor.

        :param descriptor: The descriptor to render.
        :return: Dockerfile content.
        """
        return self.template.render(**descriptor.model_dump())

    def write(self, descriptor: BuildDescriptor, context_dir: str, filename: str = "Dockerfile") -> str:
        """
        Renders the descriptor into a file inside the build context.

        :param descriptor: The descriptor to render.
        :param context_dir: The build context directory.
        :param filename: Name of the file to write.
        :return: The path to the written file.
        """
        path = os.path.join(context_dir, filename)
        with open(path, "w") as f:
            f.write(self.render(descriptor))
        return path
