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
Contract between the image builder and the container runtime that does the
actual virtualization.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..exceptions import DriverError


# Environment handed to in-container commands in place of the host's.
MINIMAL_ENV = [
    "SHELL=/bin/bash",
    "USER=root",
    "HOME=/root",
    "TERM=xterm",
    "LANG=C.UTF-8",
    "PATH=/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin",
]

ROOTFS_KEYS = ("lxc.rootfs.path", "lxc.rootfs")


@dataclass(frozen=True)
class Container:
    """Handle to a container known to a runtime driver."""
    name: str
    volume: Optional[str] = None


class ContainerDriver(ABC):
    """
    Container lifecycle and execution primitives consumed by the builder.
    """

    @abstractmethod
    def clone_and_start(self, base: str, new_id: str, volume: Optional[str] = None) -> Container:
        """Clones ``base`` into a new container ``new_id`` and starts it."""

    @abstractmethod
    def lookup(self, name: str) -> Container:
        """Returns a handle for an existing container without starting it."""

    @abstractmethod
    def is_defined(self, container: Container) -> bool:
        """Whether the container exists."""

    @abstractmethod
    def is_running(self, container: Container) -> bool:
        """Whether the container is running."""

    @abstractmethod
    def stop(self, container: Container) -> None:
        """Stops a running container."""

    @abstractmethod
    def destroy(self, container: Container) -> None:
        """Removes a stopped container."""

    @abstractmethod
    def run_command(self,
                    container: Container,
                    argv: List[str],
                    env: List[str],
                    cwd: str,
                    clear_env: bool = True) -> int:
        """
        Runs ``argv`` inside the container and returns its exit code.

        Raises DriverError if the command could not be run at all.
        """

    @abstractmethod
    def config_item(self, container: Container, key: str) -> List[str]:
        """Returns the values of a container configuration key."""

    @abstractmethod
    def export(self, name: str, dest_file: str, sudo: bool = False) -> None:
        """Archives the named container into ``dest_file``."""

    def rootfs(self, container: Container) -> str:
        """
        Host path of the container's root filesystem.

        Handles both the ``lxc.rootfs.path`` and legacy ``lxc.rootfs`` keys
        and strips a backing store prefix such as ``dir:``. For overlay
        stores the writable upper directory is returned.
        """
        for key in ROOTFS_KEYS:
            values = self.config_item(container, key)
            if values and values[0]:
                path = values[0]
                if ":" in path and not path.startswith("/"):
                    path = path.split(":")[-1]
                return path
        raise DriverError(f"No root filesystem configured for container {container.name}")

    def rootfs_join(self, container: Container, *parts: str) -> str:
        """Joins in-container path parts onto the container's root filesystem."""
        return os.path.join(self.rootfs(container), *[p.lstrip("/") for p in parts])
