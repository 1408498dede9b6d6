import os
from click.testing import CliRunner
from nut.CLI.main import cli


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert 'build LXC container images' in result.output


def test_cli_build_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['build', '--help'])
    assert result.exit_code == 0
    assert '--volume' in result.output


def test_cli_build(driver, tmp_path):
    script = tmp_path / "Dockerfile"
    script.write_text("FROM base\nENV A=1\nLABEL role=web\nRUN make\n")
    runner = CliRunner()
    result = runner.invoke(cli, ['build', '-f', str(script), '-n', 'web', '--export', 'web.tgz'],
                           obj={'driver': driver})
    assert result.exit_code == 0, result.output
    assert 'Built web' in result.output
    assert driver.clones == [("base", "web", None)]
    assert driver.stopped == ["web"]
    assert driver.exports == [("web", "web.tgz", False)]
    assert os.path.exists(os.path.join(driver.container_dir("web"), "manifest.yml"))


def test_cli_build_missing_script(driver, tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ['build', '-f', str(tmp_path / "nope"), '-n', 'web'],
                           obj={'driver': driver})
    assert result.exit_code == 1
    assert 'Error: Failed to read build script' in result.output


def test_cli_build_failure(driver, tmp_path):
    script = tmp_path / "Dockerfile"
    script.write_text("FROM base\nCMD a\nCMD b\n")
    runner = CliRunner()
    result = runner.invoke(cli, ['build', '-f', str(script), '-n', 'web'], obj={'driver': driver})
    assert result.exit_code == 1
    assert 'already defined' in result.output


def test_cli_destroy(driver):
    driver.clone_and_start("base", "web")
    runner = CliRunner()
    result = runner.invoke(cli, ['destroy', 'web'], obj={'driver': driver})
    assert result.exit_code == 0
    assert driver.destroyed == ["web"]


def test_cli_stop_unknown(driver):
    runner = CliRunner()
    result = runner.invoke(cli, ['stop', 'ghost'], obj={'driver': driver})
    assert result.exit_code == 1
    assert 'not present' in result.output


def test_cli_build_undecodable_script(driver, tmp_path):
    script = tmp_path / "Dockerfile"
    script.write_bytes(b"FROM base\nRUN echo \xff\n")
    runner = CliRunner()
    result = runner.invoke(cli, ['build', '-f', str(script), '-n', 'web'], obj={'driver': driver})
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert 'Error: Failed to read build script' in result.output
    assert driver.clones == []


def test_cli_build_uses_configured_volume(driver, tmp_path):
    script = tmp_path / "Dockerfile"
    script.write_text("FROM base\n")
    env_file = tmp_path / ".env"
    env_file.write_text("NUT_VOLUME=btrfs\n")
    runner = CliRunner()
    result = runner.invoke(cli, ['--env-file', str(env_file), 'build', '-f', str(script), '-n', 'web'],
                           obj={'driver': driver})
    assert result.exit_code == 0, result.output
    assert driver.clones == [("base", "web", "btrfs")]
