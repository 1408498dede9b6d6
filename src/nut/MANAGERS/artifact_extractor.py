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
Extraction of build artifacts from a finished container back to the host.
"""
import os
import logging
from typing import List

from ..MODELS.build_state import BuildState
from ..RUNNERS.command_runner import CommandRunner
from .file_stager import copy_path

logger = logging.getLogger(__name__)

ARTIFACT_LABEL_PREFIX = "nut_artifact_"


class ArtifactExtractor:
    """
    Copies the paths named by artifact labels out of the container into the
    host's current directory.
    """
    def __init__(self, runner: CommandRunner):
        self.runner = runner
        self.driver = runner.driver

    @staticmethod
    def artifact_paths(state: BuildState) -> List[str]:
        """In-container paths named by ``nut_artifact_*`` labels."""
        return [value for key, value in state.manifest.labels.items()
                if key.startswith(ARTIFACT_LABEL_PREFIX)]

    def extract(self, state: BuildState) -> List[str]:
        """
        Extracts every labelled artifact.

        A failure to copy inside the container aborts; a failure to copy from
        the container's root filesystem to the host is only logged.

        :param state: Final build state.
        :return: Host paths of the artifacts that were extracted.
        """
        extracted = []
        for path in self.artifact_paths(state):
            artifact = os.path.basename(path.rstrip("/"))
            self.runner.run(state, ["cp", "-r", path, os.path.join("/tmp", artifact)])

            in_rootfs = self.driver.rootfs_join(state.container, "tmp", artifact)
            target = os.path.join(os.getcwd(), artifact)
            try:
                copy_path(in_rootfs, target)
            except OSError as e:
                logger.error("Failed to copy files from container to host. Error: %s", e)
                continue
            logger.info("Extracted artifact %s to %s", path, target)
            extracted.append(target)
        return extracted
