"""
Model for the image metadata recorded alongside a built container.
"""
from typing import List, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class Manifest(BaseModel):
    """
    Image metadata accumulated while a build script is replayed.

    Instances are frozen; the builder derives a new manifest for every change
    with ``model_copy(update=...)``. Serialized keys use the camelCase names
    of the on-disk manifest.yml.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    env: List[str] = []
    labels: Dict[str, str] = {}
    exposed_ports: List[int] = Field(default=[], alias="exposedPorts")
    maintainers: List[str] = []
    work_dir: Optional[str] = Field(default=None, alias="workDir")
    user: Optional[str] = None
    entry_point: List[str] = Field(default=[], alias="entryPoint")

    def to_document(self) -> Dict:
        """Plain-data form of the manifest, keyed as in manifest.yml."""
        return {
            "env": list(self.env),
            "labels": dict(self.labels),
            "exposedPorts": list(self.exposed_ports),
            "maintainers": list(self.maintainers),
            "workDir": self.work_dir or "",
            "user": self.user or "",
            "entryPoint": list(self.entry_point),
        }

    @classmethod
    def from_document(cls, data: Optional[Dict]) -> "Manifest":
        """Builds a manifest from parsed manifest.yml data; empty strings mean unset."""
        data = dict(data or {})
        for key in ("workDir", "user"):
            if data.get(key) == "":
                data[key] = None
        for key in ("env", "maintainers", "entryPoint", "exposedPorts"):
            if data.get(key) is None:
                data.pop(key, None)
        if data.get("labels") is None:
            data.pop("labels", None)
        return cls.model_validate(data)
