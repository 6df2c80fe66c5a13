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
Docker command-line implementation of the image builder.
"""
from ..RUNNERS.command_runner import CommandRunner


class DockerImageBuilder:
    """
    Builds and tags images with the docker CLI.
    """
    def __init__(self, runner: CommandRunner, docker_cmd: str = "docker"):
        self.runner = runner
        self.docker_cmd = docker_cmd

    def build(self, context_dir: str, tag: str) -> None:
        """
        Builds the Dockerfile in context_dir without cache, always removing
        intermediate containers.
        """
        self.runner.run(
            [self.docker_cmd, "build", "--force-rm", "--no-cache", "-t", tag, "."],
            cwd=context_dir,
        )

    def tag(self, source: str, target: str) -> None:
        self.runner.run([self.docker_cmd, "tag", source, target])
