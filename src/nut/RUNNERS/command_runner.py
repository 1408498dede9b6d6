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
Execution of build commands inside a container through a generated shell script.
"""
import os
import logging
from typing import List
from jinja2 import Template

from ..MODELS.build_state import BuildState
from ..RUNTIME.driver import ContainerDriver, MINIMAL_ENV
from ..exceptions import CommandFailedError, DriverError, NoContainerError

logger = logging.getLogger(__name__)

SCRIPT_PATH = "/tmp/dockerfile.sh"
EXEC_CWD = "/root"

SCRIPT_TEMPLATE = Template(
    "#!/bin/bash\n"
    "{% for entry in env %}export {{ entry }}\n{% endfor %}"
    "{% if cwd %}cd {{ cwd }}\n{% endif %}"
    "{% if user %}su - {{ user }}\n{% endif %}"
    "{{ command }}"
)


class CommandRunner:
    """
    Runs shell commands inside the container of a build, honoring the build's
    environment, working directory and user.
    """
    def __init__(self, driver: ContainerDriver):
        """
        Initializes the command runner.

        Args:
            driver (ContainerDriver): Runtime driver used to execute the script.
        """
        self.driver = driver

    @staticmethod
    def render_script(state: BuildState, command: List[str]) -> str:
        """
        Renders the script body for a command.

        Args:
            state (BuildState): Current build state.
            command (List[str]): Command tokens, joined with spaces.

        Returns:
            str: The script text.
        """
        return SCRIPT_TEMPLATE.render(
            env=state.env,
            cwd=state.cwd,
            user=state.user,
            command=" ".join(command),
        )

    def run(self, state: BuildState, command: List[str]):
        """
        Executes a command inside the build's container.

        The ambient environment is cleared; only the build's own environment
        is exported by the script.

        Args:
            state (BuildState): Current build state; must hold a container.
            command (List[str]): Command tokens.

        Raises:
            CommandFailedError: If the command exits non-zero.
            DriverError: If the runtime cannot execute the script.
        """
        if state.container is None:
            raise NoContainerError("No container has been created yet. Use FROM directive")

        text = " ".join(command)
        script = self.render_script(state, command)
        script_path = self.driver.rootfs_join(state.container, SCRIPT_PATH)
        try:
            with open(script_path, 'w') as f:
                f.write(script)
            os.chmod(script_path, 0o755)
        except OSError as e:
            logger.error("Failed to write %s. Error: %s", script_path, e)
            raise DriverError(f"Failed to write command script {script_path}: {e}") from e

        logger.debug("Executing:\n %s", script)
        try:
            exit_code = self.driver.run_command(
                state.container,
                ["/bin/bash", SCRIPT_PATH],
                env=MINIMAL_ENV,
                cwd=EXEC_CWD,
                clear_env=True,
            )
        except DriverError as e:
            logger.error("Failed to execute command: '%s'. Error: %s", text, e)
            raise

        if exit_code != 0:
            logger.warning("Failed to execute command: '%s'. Exit code: %d", text, exit_code)
            raise CommandFailedError(text, exit_code)
