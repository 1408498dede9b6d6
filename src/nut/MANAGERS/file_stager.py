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
Staging of host files into a container's filesystem.
"""
import os
import shutil
import logging

from ..MODELS.build_state import BuildState
from ..RUNNERS.command_runner import CommandRunner
from ..exceptions import NoContainerError, NutError, StagingError

logger = logging.getLogger(__name__)


def copy_path(source: str, target: str):
    """
    Recursively copies a file or directory, preserving symlinks and metadata.

    Raises:
        OSError: If the copy fails.
    """
    if os.path.isdir(source) and not os.path.islink(source):
        shutil.copytree(source, target, symlinks=True, dirs_exist_ok=True)
    else:
        shutil.copy2(source, target, follow_symlinks=False)


def remove_path(path: str):
    """Removes a file, symlink or directory tree."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    elif os.path.lexists(path):
        os.remove(path)


class FileStager:
    """
    Copies host files into a container by way of the container's /tmp.
    """
    def __init__(self, runner: CommandRunner):
        """
        Initializes the file stager.

        :param runner: Command runner used to move staged files into place.
        """
        self.runner = runner
        self.driver = runner.driver

    def stage(self, state: BuildState, src: str, dest: str):
        """
        Copies ``src`` from the host to ``dest`` inside the container.

        The source lands in the container's /tmp first, is copied to its
        destination by a command run inside the container, and the staged
        copy is then removed.

        :param state: Current build state; must hold a container.
        :param src: Host path, relative to the current directory or absolute.
        :param dest: Destination path inside the container.
        """
        if state.container is None:
            raise NoContainerError("No container has been created yet. Use FROM directive")

        abs_path = os.path.abspath(src)
        base = os.path.basename(abs_path.rstrip(os.sep))
        staged = self.driver.rootfs_join(state.container, "tmp", base)

        logger.info("Staging %s -> %s", abs_path, staged)
        try:
            copy_path(abs_path, staged)
        except OSError as e:
            logger.error("Failed to copy temporary files from host to container tmp directory")
            raise StagingError(f"Failed to stage {abs_path} into container: {e}") from e

        try:
            self.runner.run(state, ["cp", "-r", os.path.join("/tmp", base), dest])
        except NutError:
            logger.error("Failed to copy temporary files within container's /tmp to %s", dest)
            raise

        try:
            remove_path(staged)
        except OSError as e:
            logger.error("Failed to delete temporary files")
            raise StagingError(f"Failed to remove staged copy {staged}: {e}") from e
