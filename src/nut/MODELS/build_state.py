"""
Model for the context threaded through the directives of a single build.
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict

from .manifest import Manifest
from ..RUNTIME.driver import Container


class BuildState(BaseModel):
    """
    Per-build context: the container being built, the live environment and
    working directory used for command execution, and the manifest under
    construction.

    Directive handlers never mutate a state; they return the next one.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    container: Optional[Container] = None
    env: List[str] = []
    cwd: Optional[str] = None
    manifest: Manifest = Manifest()
    entry_point_set: bool = False

    @property
    def user(self) -> Optional[str]:
        return self.manifest.user

    def evolve(self, **changes) -> "BuildState":
        """Returns a copy of this state with the given fields replaced."""
        return self.model_copy(update=changes)

    def with_manifest(self, **changes) -> "BuildState":
        """Returns a copy of this state whose manifest has the given fields replaced."""
        return self.model_copy(update={"manifest": self.manifest.model_copy(update=changes)})
