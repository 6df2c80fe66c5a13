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
Command Line Interface for P2D.
"""
import functools
import os
import click
from .. import __author__, __version__
from ..BUILDERS.image_synthesizer import ImageSynthesizer
from ..config import Settings
from ..errors import P2DError
from ..MANAGERS.environment_initializer import EnvironmentInitializer
from ..MODELS.initializer_config import InitializerConfig
from ..RUNNERS.command_runner import CommandRunner
from ..TOOLS.docker import DockerImageBuilder
from ..TOOLS.hab import HabPackageManager, HabStudioMaterializer
from ..UTILS.log_setup import configure_logging


def fail_fast(func):
    """
    Report p2d errors on stderr and exit with the failing command's status.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except P2DError as e:
            click.echo(f"Error: {e}", err=True)
            raise SystemExit(e.exit_code)
    return wrapper


def build_synthesizer(settings: Settings, program: str) -> ImageSynthesizer:
    """
    Wires the synthesizer to the real hab-studio and docker tools.
    """
    runner = CommandRunner(trace=settings.debug)
    studio = runner.require(settings.studio_cmd)
    docker = runner.require(settings.docker_cmd)
    return ImageSynthesizer(
        HabStudioMaterializer(runner, studio_cmd=studio),
        DockerImageBuilder(runner, docker_cmd=docker),
        settings=settings,
        program=program,
    )


def run_dockerize(settings: Settings, packages, program: str):
    configure_logging(settings.debug)
    synthesizer = build_synthesizer(settings, program)
    metadata = synthesizer.synthesize(packages[0], list(packages))
    click.echo(f"Built {metadata.version_tag}")
    click.echo(f"Tagged {metadata.latest_tag}")


@click.group()
@click.version_option(__version__, prog_name="p2d")
@click.pass_context
def cli(ctx):
    """
    P2D - Package to Docker.

    Builds container images from Habitat packages and prepares native build
    environments from installed packages.
    """
    ctx.ensure_object(dict)
    ctx.obj.setdefault('settings', Settings.from_env())


@cli.command()
@click.option('--keep-context', is_flag=True, help='Leave the temporary build context on disk')
@click.argument('packages', nargs=-1, required=True)
@click.pass_context
@fail_fast
def dockerize(ctx, keep_context, packages):
    """Create a Docker image from a set of packages.

    The first package names the image and is started by the container.
    """
    settings = ctx.obj['settings']
    if keep_context:
        settings = settings.model_copy(update={'keep_context': True})
    run_dockerize(settings, packages, program="p2d")


@cli.command('init-env')
@click.option('--config', '-c', 'config_path', type=click.Path(dir_okay=False),
              default='build-env.yml', help='Initializer config file')
@click.option('--format', '-f', 'output_format',
              type=click.Choice(['posix', 'powershell', 'json']), default='posix',
              help='How to print the environment')
@click.argument('packages', nargs=-1)
@click.pass_context
@fail_fast
def init_env(ctx, config_path, output_format, packages):
    """Install build dependencies and print the build environment."""
    settings = ctx.obj['settings']
    configure_logging(settings.debug)

    if os.path.exists(config_path):
        config = InitializerConfig.load(config_path)
    else:
        config = InitializerConfig()

    runner = CommandRunner(trace=settings.debug)
    package_manager = HabPackageManager(
        runner,
        hab_cmd=runner.require(settings.hab_cmd),
        env={'HAB_LICENSE': config.hab_license},
    )
    initializer = EnvironmentInitializer(package_manager, config)
    environment = initializer.initialize(list(packages) if packages else None)

    click.echo(environment.as_shell(output_format, base_env=dict(os.environ)))


HELP = f"""Create a Docker container from a set of Habitat packages.

\b
{__author__}
"""


@click.command(help=HELP)
@click.version_option(__version__, prog_name="hab-pkg-dockerize")
@click.argument('packages', nargs=-1, required=True)
@fail_fast
def dockerize_main(packages):
    run_dockerize(Settings.from_env(), packages, program="hab-pkg-dockerize")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
