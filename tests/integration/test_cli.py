import json
import os
import shutil
import sys
import pytest
from click.testing import CliRunner
from conftest import FakeMaterializer, FakePackageManager, RecordingBuilder
from p2d.BUILDERS.image_synthesizer import ImageSynthesizer
from p2d.CLI import main as cli_main
from p2d.CLI.main import cli, dockerize_main
from p2d.config import Settings


@pytest.fixture
def fake_tools(monkeypatch):
    tools = {
        "materializer": FakeMaterializer(idents={"acme/widget": "acme/widget/1.2.0/20200101000000"}),
        "builder": RecordingBuilder(),
    }

    def build_synthesizer(settings, program):
        return ImageSynthesizer(tools["materializer"], tools["builder"], settings=settings, program=program)

    monkeypatch.setattr(cli_main, "build_synthesizer", build_synthesizer)
    return tools


@pytest.fixture
def fake_package_manager(monkeypatch):
    pm = FakePackageManager(installed=["core/openssl/1.0.2j/20170513215106"])
    monkeypatch.setattr(cli_main, "HabPackageManager", lambda runner, hab_cmd, env: pm)
    return pm


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert 'dockerize' in result.output
    assert 'init-env' in result.output


def test_dockerize_help():
    runner = CliRunner()
    result = runner.invoke(dockerize_main, ['--help'])
    assert result.exit_code == 0
    assert 'Create a Docker container from a set of Habitat packages' in result.output


def test_dockerize_requires_packages():
    runner = CliRunner()
    result = runner.invoke(dockerize_main, [])
    assert result.exit_code != 0


def test_dockerize(fake_tools):
    runner = CliRunner()
    result = runner.invoke(dockerize_main, ['acme/widget', 'core/redis'])
    assert result.exit_code == 0, result.output
    assert 'Built acme/widget:1.2.0-20200101000000' in result.output
    assert 'Tagged acme/widget:latest' in result.output
    assert fake_tools["materializer"].calls[0][0] == ['acme/widget', 'core/redis']
    assert os.path.basename(fake_tools["builder"].context_dir).startswith('hab-pkg-dockerize-')


def test_dockerize_honors_bldr_root(fake_tools, monkeypatch):
    monkeypatch.setenv('BLDR_ROOT', '/hab')
    fake_tools["materializer"].bldr_root = '/hab'
    runner = CliRunner()
    result = runner.invoke(dockerize_main, ['acme/widget'])
    assert result.exit_code == 0, result.output
    assert 'VOLUME /hab/svc/widget/data /hab/svc/widget/config' in fake_tools["builder"].dockerfile


def test_dockerize_propagates_exit_code(fake_tools):
    fake_tools["builder"] = RecordingBuilder(fail_code=125)
    runner = CliRunner()
    result = runner.invoke(dockerize_main, ['acme/widget'])
    assert result.exit_code == 125
    assert 'Error:' in result.output


def test_dockerize_invalid_ident(fake_tools):
    runner = CliRunner()
    result = runner.invoke(dockerize_main, ['widget'])
    assert result.exit_code == 1
    assert 'Invalid package identifier' in result.output


def test_group_dockerize_keep_context(fake_tools):
    runner = CliRunner()
    settings = Settings()
    result = runner.invoke(cli, ['dockerize', '--keep-context', 'acme/widget'], obj={'settings': settings})
    assert result.exit_code == 0, result.output
    context_dir = fake_tools["builder"].context_dir
    assert os.path.exists(context_dir)
    shutil.rmtree(context_dir)


def test_init_env_json(fake_package_manager, tmp_path):
    config = tmp_path / 'build-env.yml'
    config.write_text('packages:\n  - core/openssl\n  - core/zeromq\npath_separator: ":"\n')
    settings = Settings(hab_cmd=sys.executable)
    runner = CliRunner()
    result = runner.invoke(cli, ['init-env', '--config', str(config), '--format', 'json'],
                           obj={'settings': settings})
    assert result.exit_code == 0, result.output
    assert fake_package_manager.install_calls == ['core/zeromq']
    payload = json.loads(result.output[result.output.index('{'):])
    env = payload['environment']
    assert env['LIBZMQ_PREFIX'] == '/hab/pkgs/core/zeromq'
    assert env['OPENSSL_LIB_DIR'] == '/hab/pkgs/core/openssl/lib'
    assert env['HAB_LICENSE'] == 'accept-no-persist'


def test_init_env_packages_override_config(fake_package_manager, tmp_path):
    settings = Settings(hab_cmd=sys.executable)
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ['init-env', '--config', str(tmp_path / 'missing.yml'), '--format', 'powershell', 'core/cacerts'],
        obj={'settings': settings},
    )
    assert result.exit_code == 0, result.output
    assert fake_package_manager.install_calls == ['core/cacerts']
    assert '$env:SSL_CERT_FILE=' in result.output


def test_init_env_missing_hab(tmp_path):
    settings = Settings(hab_cmd='p2d-no-such-hab-12345')
    runner = CliRunner()
    result = runner.invoke(cli, ['init-env', '--config', str(tmp_path / 'missing.yml')],
                           obj={'settings': settings})
    assert result.exit_code == 1
    assert 'p2d-no-such-hab-12345' in result.output


def test_init_env_bad_config(tmp_path):
    config = tmp_path / 'build-env.yml'
    config.write_text('- core/openssl\n')
    settings = Settings(hab_cmd=sys.executable)
    runner = CliRunner()
    result = runner.invoke(cli, ['init-env', '--config', str(config)], obj={'settings': settings})
    assert result.exit_code == 1
    assert 'expected a mapping' in result.output


def test_init_env_reports_toolchain(fake_package_manager, tmp_path):
    config = tmp_path / 'build-env.yml'
    config.write_text('packages:\n  - core/zeromq\n')
    (tmp_path / 'rust-toolchain').write_text('1.20.0\n')
    settings = Settings(hab_cmd=sys.executable)
    runner = CliRunner()
    result = runner.invoke(cli, ['init-env', '--config', str(config), '--format', 'json'],
                           obj={'settings': settings})
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output[result.output.index('{'):])
    assert payload['toolchain_version'] == '1.20.0'
