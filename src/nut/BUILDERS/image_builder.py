"""
Builders that replay build script statements against a live container.
"""
import re
import logging
from typing import Callable, Dict, List, Optional

from ..PARSERS.statement_parser import StatementParser
from ..MODELS.statement import Directive, Statement
from ..MODELS.manifest import Manifest
from ..MODELS.build_state import BuildState
from ..RUNTIME.driver import ContainerDriver
from ..RUNNERS.command_runner import CommandRunner
from ..MANAGERS.file_stager import FileStager
from ..MANAGERS.artifact_extractor import ArtifactExtractor
from ..MANAGERS.manifest_store import load_manifest, write_manifest
from ..config import NutConfig
from ..exceptions import (
    DuplicateBaseImageError,
    DuplicateEntrypointError,
    InvalidLabelError,
    ManifestError,
    DriverError,
    MissingArgumentError,
    NoContainerError,
)

logger = logging.getLogger(__name__)

PORT = re.compile(r'^[0-9]{1,5}$')
MAX_PORT = 65535

Handler = Callable[[BuildState, List[str]], BuildState]


def parent_name(reference: str) -> str:
    """
    Resolves a FROM reference to the name of the container to clone.

    ``owner/image:tag`` becomes ``owner-image-tag``.
    """
    return reference.replace("/", "-").replace(":", "-")


class ImageBuilder:
    """
    Replays the statements of a build script against a container cloned from
    the base image, accumulating the image's manifest.
    """
    def __init__(self, build_id: str, driver: ContainerDriver, config: Optional[NutConfig] = None):
        """
        Initializes the ImageBuilder.

        :param build_id: Name of the container to build.
        :param driver: Runtime driver for container operations.
        :param config: Settings; supplies the default volume.
        """
        self.build_id = build_id
        self.driver = driver
        self.config = config or NutConfig()
        self.parser = StatementParser()
        self.runner = CommandRunner(driver)
        self.stager = FileStager(self.runner)
        self.extractor = ArtifactExtractor(self.runner)
        self.statements: List[Statement] = []
        self.state = BuildState()
        self.volume: Optional[str] = None
        self.handlers: Dict[Directive, Handler] = {
            Directive.FROM: self._from,
            Directive.RUN: self._run,
            Directive.ENV: self._env,
            Directive.WORKDIR: self._workdir,
            Directive.ADD: self._add,
            Directive.COPY: self._add,
            Directive.LABEL: self._label,
            Directive.EXPOSE: self._expose,
            Directive.MAINTAINER: self._maintainer,
            Directive.USER: self._user,
            Directive.VOLUME: self._ignored,
            Directive.STOPSIGNAL: self._ignored,
            Directive.CMD: self._entrypoint,
            Directive.ENTRYPOINT: self._entrypoint,
        }

    def parse(self, script_path: str) -> List[Statement]:
        """
        Parses a build script file and keeps its statements for ``build``.
        """
        self.statements = self.parser.parse(script_path)
        return self.statements

    def parse_from_string(self, content: str) -> List[Statement]:
        """
        Parses build script text and keeps its statements for ``build``.
        """
        self.statements = self.parser.parse_from_string(content)
        return self.statements

    def build(self, volume: Optional[str] = None) -> Manifest:
        """
        Executes every parsed statement in order, then extracts artifacts and
        writes the manifest.

        The first failure aborts the build and leaves the container as the
        last successful directive left it.

        :param volume: Storage volume to clone the base image onto; defaults
            to the configured volume.
        :return: The final manifest.
        """
        self.volume = volume or self.config.volume
        self.state = BuildState()
        for statement in self.statements:
            logger.info("Processing:|%s|", statement.raw)
            self.state = self.apply(self.state, statement)

        if self.state.container is None:
            raise NoContainerError("No container has been created yet. Use FROM directive")
        self.extractor.extract(self.state)
        write_manifest(self.driver, self.state.container, self.state.manifest)
        return self.state.manifest

    def apply(self, state: BuildState, statement: Statement) -> BuildState:
        """
        Applies one statement to a build state and returns the next state.
        """
        if statement.directive is not Directive.FROM and state.container is None:
            logger.error("No container has been created yet. Use FROM directive")
            raise NoContainerError(
                f"{statement.directive.value} on line {statement.line} needs a container. Use FROM directive"
            )
        return self.handlers[statement.directive](state, statement.arguments)

    @staticmethod
    def _require(directive: Directive, args: List[str], count: int):
        if len(args) < count:
            raise MissingArgumentError(
                f"{directive.value} needs {count} argument(s), got {len(args)}"
            )

    def _from(self, state: BuildState, args: List[str]) -> BuildState:
        if state.container is not None:
            logger.error("Container already built. Multiple FROM declaration?")
            raise DuplicateBaseImageError("Container already built. Multiple FROM declaration?")
        self._require(Directive.FROM, args, 1)

        name = parent_name(args[0])
        try:
            container = self.driver.clone_and_start(name, self.build_id, self.volume)
        except DriverError as e:
            logger.error("Failed to clone container. Error: %s", e)
            raise
        state = state.evolve(container=container)

        try:
            inherited = load_manifest(self.driver, self.driver.lookup(name))
        except ManifestError as e:
            logger.warning("Failed to load manifest from parent container. Error: %s", e)
            return state
        return state.evolve(manifest=inherited, env=list(inherited.env), cwd=inherited.work_dir)

    def _run(self, state: BuildState, args: List[str]) -> BuildState:
        logger.debug("Attempting to execute: %r", args)
        self.runner.run(state, args)
        return state

    def _env(self, state: BuildState, args: List[str]) -> BuildState:
        entries = []
        i = 0
        while i < len(args):
            if '=' in args[i]:
                entries.append(args[i])
                i += 1
            elif i + 1 < len(args):
                entries.append(args[i] + "=" + args[i + 1])
                i += 2
            else:
                raise MissingArgumentError(f"ENV {args[i]} has no value")
        return state.evolve(env=state.env + entries).with_manifest(env=state.manifest.env + entries)

    def _workdir(self, state: BuildState, args: List[str]) -> BuildState:
        self._require(Directive.WORKDIR, args, 1)
        return state.evolve(cwd=args[0]).with_manifest(work_dir=args[0])

    def _add(self, state: BuildState, args: List[str]) -> BuildState:
        self._require(Directive.ADD, args, 2)
        self.stager.stage(state, args[0], args[1])
        return state

    def _label(self, state: BuildState, args: List[str]) -> BuildState:
        labels = dict(state.manifest.labels)
        for arg in args:
            if '=' not in arg:
                logger.error("Invalid LABEL instruction. LABELS must have '=' in them")
                raise InvalidLabelError(f"Invalid LABEL '{arg}'. LABELS must have '=' in them")
            key, value = arg.split('=', 1)
            labels[key] = value
        return state.with_manifest(labels=labels)

    def _expose(self, state: BuildState, args: List[str]) -> BuildState:
        ports = list(state.manifest.exposed_ports)
        for arg in args:
            if not PORT.match(arg) or int(arg) > MAX_PORT:
                logger.error("Error parsing ports in EXPOSE instruction: %r", arg)
                continue
            port = int(arg)
            if port not in ports:
                ports.append(port)
        return state.with_manifest(exposed_ports=ports)

    def _maintainer(self, state: BuildState, args: List[str]) -> BuildState:
        return state.with_manifest(maintainers=state.manifest.maintainers + [" ".join(args)])

    def _user(self, state: BuildState, args: List[str]) -> BuildState:
        self._require(Directive.USER, args, 1)
        return state.with_manifest(user=args[0])

    def _ignored(self, state: BuildState, args: List[str]) -> BuildState:
        logger.debug("Ignoring unsupported instruction arguments %r", args)
        return state

    def _entrypoint(self, state: BuildState, args: List[str]) -> BuildState:
        if state.entry_point_set:
            logger.error("Entrypoint/CMD is already defined. Probably multiple declaration")
            raise DuplicateEntrypointError("Entrypoint/CMD is already defined. Probably multiple declaration")
        return state.evolve(entry_point_set=True).with_manifest(entry_point=list(args))

    def attach(self):
        """
        Points the builder at an existing container named after its build id,
        for stopping, destroying or exporting a container built earlier.
        """
        self.state = BuildState(container=self.driver.lookup(self.build_id))
        return self.state.container

    def _container(self):
        if self.state.container is None:
            raise NoContainerError("Container is not initialized")
        if not self.driver.is_defined(self.state.container):
            raise NoContainerError("Container is not present")
        return self.state.container

    def stop(self):
        """
        Stops the built container if it is running.
        """
        container = self._container()
        if self.driver.is_running(container):
            self.driver.stop(container)

    def destroy(self):
        """
        Stops the built container if needed and destroys it.
        """
        container = self._container()
        if self.driver.is_running(container):
            try:
                self.driver.stop(container)
            except DriverError as e:
                logger.error("Failed to stop running container. Err: %s", e)
                raise
        self.driver.destroy(container)

    def export(self, dest_file: str, sudo: bool = False):
        """
        Archives the built container.

        :param dest_file: Path of the archive to create.
        :param sudo: Run the archiver with elevated privileges.
        """
        container = self._container()
        self.driver.export(container.name, dest_file, sudo)
