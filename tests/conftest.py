"""
Shared fixtures: an in-memory container driver backed by a temporary directory.
"""
import os
import pytest
from typing import List, Optional

from nut.RUNTIME.driver import Container, ContainerDriver
from nut.exceptions import DriverError


class FakeDriver(ContainerDriver):
    """Driver that keeps containers as plain directories under ``root``."""

    def __init__(self, root: str):
        self.root = root
        self.running = set()
        self.clones = []
        self.commands = []
        self.scripts = []
        self.exit_codes = []
        self.exports = []
        self.destroyed = []
        self.stopped = []
        self.fail_clone = False
        self.fail_run = False

    def container_dir(self, name: str) -> str:
        return os.path.join(self.root, name)

    def make_container(self, name: str) -> str:
        rootfs = os.path.join(self.container_dir(name), "rootfs")
        os.makedirs(os.path.join(rootfs, "tmp"), exist_ok=True)
        return rootfs

    def clone_and_start(self, base: str, new_id: str, volume: Optional[str] = None) -> Container:
        if self.fail_clone:
            raise DriverError(f"cannot clone {base}")
        self.clones.append((base, new_id, volume))
        self.make_container(new_id)
        self.running.add(new_id)
        return Container(name=new_id, volume=volume)

    def lookup(self, name: str) -> Container:
        return Container(name=name)

    def is_defined(self, container: Container) -> bool:
        return os.path.isdir(self.container_dir(container.name))

    def is_running(self, container: Container) -> bool:
        return container.name in self.running

    def stop(self, container: Container) -> None:
        self.stopped.append(container.name)
        self.running.discard(container.name)

    def destroy(self, container: Container) -> None:
        self.destroyed.append(container.name)

    def run_command(self, container, argv: List[str], env: List[str], cwd: str, clear_env: bool = True) -> int:
        if self.fail_run:
            raise DriverError("attach failed")
        script = os.path.join(self.container_dir(container.name), "rootfs", argv[-1].lstrip("/"))
        with open(script) as f:
            body = f.read()
        self.scripts.append(body)
        self.commands.append((argv, env, cwd, clear_env))
        return self.exit_codes.pop(0) if self.exit_codes else 0

    def config_item(self, container: Container, key: str) -> List[str]:
        if key == "lxc.rootfs.path" and self.is_defined(container):
            return ["dir:" + os.path.join(self.container_dir(container.name), "rootfs")]
        return []

    def export(self, name: str, dest_file: str, sudo: bool = False) -> None:
        self.exports.append((name, dest_file, sudo))

    @property
    def last_commands(self) -> List[str]:
        """Final line of every script run so far."""
        return [script.splitlines()[-1] for script in self.scripts]


@pytest.fixture
def driver(tmp_path):
    return FakeDriver(str(tmp_path / "lxc"))
