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
Exceptions raised while parsing build scripts and building images.
"""
from typing import List, Optional


class NutError(Exception):
    """Base exception for all application-specific errors."""

    pass


# --- 1. Errors raised before any container work begins ---
class ParseError(NutError):
    """Base class for errors encountered while reading or parsing a build script."""

    pass


class ScriptReadError(ParseError):
    """Raised when the build script cannot be read."""

    pass


class UnterminatedContinuationError(ParseError):
    """Raised when the script ends while a line continuation is still pending."""

    pass


class UnknownDirectiveError(ParseError):
    """Raised when a statement starts with a keyword that is not a known directive."""

    def __init__(self, keyword: str, line: Optional[int] = None):
        self.keyword = keyword
        self.line = line
        where = f" on line {line}" if line is not None else ""
        super().__init__(f"Unknown instruction '{keyword}'{where}")


# --- 2. Errors raised while replaying directives ---
class BuildError(NutError):
    """Base class for errors that abort a build."""

    pass


class PreconditionError(BuildError):
    """Base class for directives that are not allowed in the current build state."""

    pass


class NoContainerError(PreconditionError):
    """Raised when a directive needs a container but no FROM has run yet."""

    pass


class DuplicateBaseImageError(PreconditionError):
    """Raised on a second FROM directive."""

    pass


class DuplicateEntrypointError(PreconditionError):
    """Raised when CMD or ENTRYPOINT is declared more than once."""

    pass


class InvalidLabelError(PreconditionError):
    """Raised when a LABEL argument has no '='."""

    pass


class MissingArgumentError(PreconditionError):
    """Raised when a directive is given fewer arguments than it needs."""

    pass


class ExecutionError(BuildError):
    """Base class for failures of container-affecting operations."""

    pass


class DriverError(ExecutionError):
    """Raised when the container runtime fails to carry out an operation."""

    def __init__(self, message: str, argv: Optional[List[str]] = None, stderr: str = ""):
        self.argv = argv
        self.stderr = stderr
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class CommandFailedError(ExecutionError):
    """Raised when a command run inside the container exits non-zero."""

    def __init__(self, command: str, exit_code: int):
        self.command = command
        self.exit_code = exit_code
        super().__init__(f"Failed to execute command: '{command}'. Exit code: {exit_code}")


class StagingError(ExecutionError):
    """Raised when files cannot be copied between the host and a container."""

    pass


class ManifestError(BuildError):
    """Raised when a manifest cannot be read or written."""

    pass
