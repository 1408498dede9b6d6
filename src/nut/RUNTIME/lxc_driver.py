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
Container runtime driver backed by the LXC command line tools.
"""

import os
import logging
import subprocess
from typing import List, Optional, Dict

from tenacity import retry, retry_if_result, stop_after_delay, wait_fixed, RetryError

from .driver import Container, ContainerDriver
from ..exceptions import DriverError

logger = logging.getLogger(__name__)

DEFAULT_LXC_PATH = "/var/lib/lxc"


class LXCDriver(ContainerDriver):
    """
    Drives LXC containers through ``lxc-copy``, ``lxc-start``, ``lxc-attach``
    and friends.
    """

    def __init__(self, lxc_path: str = DEFAULT_LXC_PATH, start_timeout: float = 30.0):
        """
        Initialize the driver.

        Args:
            lxc_path: Directory holding container definitions.
            start_timeout: Seconds to wait for a started container to report RUNNING.
        """
        self.lxc_path = lxc_path
        self.start_timeout = start_timeout

    def _lxc(self, tool: str, *args: str) -> List[str]:
        return [tool, "-P", self.lxc_path, *args]

    def _run(self, argv: List[str], check: bool = True) -> subprocess.CompletedProcess:
        logger.debug("Running: %s", " ".join(argv))
        try:
            result = subprocess.run(argv, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
        except OSError as e:
            raise DriverError(f"Failed to run {argv[0]}: {e}", argv=argv) from e
        if check and result.returncode != 0:
            raise DriverError(f"{argv[0]} exited with status {result.returncode}",
                              argv=argv, stderr=result.stderr)
        return result

    def clone_and_start(self, base: str, new_id: str, volume: Optional[str] = None) -> Container:
        argv = self._lxc("lxc-copy", "-n", base, "-N", new_id)
        if volume:
            argv += ["-B", volume]
        logger.info("Cloning container %s from %s", new_id, base)
        self._run(argv)
        container = Container(name=new_id, volume=volume)
        self._run(self._lxc("lxc-start", "-n", new_id, "-d"))
        self._wait_for_running(container)
        return container

    def _wait_for_running(self, container: Container):
        @retry(retry=retry_if_result(lambda running: not running),
               stop=stop_after_delay(self.start_timeout),
               wait=wait_fixed(0.5))
        def poll() -> bool:
            return self.is_running(container)

        try:
            poll()
        except RetryError as e:
            raise DriverError(
                f"Container {container.name} did not reach RUNNING within {self.start_timeout}s"
            ) from e

    def lookup(self, name: str) -> Container:
        return Container(name=name)

    def state(self, container: Container) -> str:
        result = self._run(self._lxc("lxc-info", "-n", container.name, "-s", "-H"), check=False)
        if result.returncode != 0:
            return "UNDEFINED"
        return result.stdout.strip()

    def is_defined(self, container: Container) -> bool:
        return os.path.isfile(self._config_path(container))

    def is_running(self, container: Container) -> bool:
        return self.state(container) == "RUNNING"

    def stop(self, container: Container) -> None:
        logger.info("Stopping container %s", container.name)
        self._run(self._lxc("lxc-stop", "-n", container.name))

    def destroy(self, container: Container) -> None:
        logger.info("Destroying container %s", container.name)
        self._run(self._lxc("lxc-destroy", "-n", container.name))

    def run_command(self,
                    container: Container,
                    argv: List[str],
                    env: List[str],
                    cwd: str,
                    clear_env: bool = True) -> int:
        attach = self._lxc("lxc-attach", "-n", container.name)
        if clear_env:
            attach.append("--clear-env")
        for entry in env:
            attach += ["-v", entry]
        # lxc-attach has no working directory option
        attach += ["--", "/usr/bin/env", "-C", cwd, *argv]
        logger.debug("Running: %s", " ".join(attach))
        try:
            return subprocess.call(attach)
        except OSError as e:
            raise DriverError(f"Failed to attach to container {container.name}: {e}", argv=attach) from e

    def _config_path(self, container: Container) -> str:
        return os.path.join(self.lxc_path, container.name, "config")

    def _read_config(self, container: Container) -> Dict[str, List[str]]:
        items: Dict[str, List[str]] = {}
        try:
            with open(self._config_path(container), 'r') as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith('#') or '=' not in line:
                        continue
                    key, value = line.split('=', 1)
                    items.setdefault(key.strip(), []).append(value.strip())
        except OSError as e:
            raise DriverError(f"Failed to read configuration of container {container.name}: {e}") from e
        return items

    def config_item(self, container: Container, key: str) -> List[str]:
        return self._read_config(container).get(key, [])

    def export(self, name: str, dest_file: str, sudo: bool = False) -> None:
        argv = ["tar", "--numeric-owner", "-czf", os.path.abspath(dest_file),
                "-C", os.path.join(self.lxc_path, name), "."]
        if sudo:
            argv.insert(0, "sudo")
        logger.info("Exporting container %s to %s", name, dest_file)
        self._run(argv)
