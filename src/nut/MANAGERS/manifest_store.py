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
Reading and writing the manifest.yml kept next to a container's root filesystem.
"""
import os
import logging
import yaml
from pydantic import ValidationError

from ..MODELS.manifest import Manifest
from ..RUNTIME.driver import Container, ContainerDriver
from ..exceptions import DriverError, ManifestError

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.yml"


def manifest_path(driver: ContainerDriver, container: Container) -> str:
    """Location of a container's manifest, one level above its rootfs."""
    try:
        rootfs = driver.rootfs(container)
    except DriverError as e:
        raise ManifestError(f"Cannot locate manifest of {container.name}: {e}") from e
    return os.path.normpath(os.path.join(rootfs, "..", MANIFEST_NAME))


def dump_manifest(manifest: Manifest) -> str:
    """Serializes a manifest to YAML with a stable key order."""
    return yaml.safe_dump(manifest.to_document(), sort_keys=False, default_flow_style=False)


def write_manifest(driver: ContainerDriver, container: Container, manifest: Manifest) -> str:
    """
    Writes the manifest of a built container.

    :return: Path of the written file.
    :raises ManifestError: If the manifest cannot be serialized or written.
    """
    path = manifest_path(driver, container)
    try:
        document = dump_manifest(manifest)
        with open(path, 'w') as f:
            f.write(document)
        os.chmod(path, 0o644)
    except (OSError, yaml.YAMLError) as e:
        raise ManifestError(f"Failed to write manifest {path}: {e}") from e
    logger.info("Wrote manifest %s", path)
    return path


def load_manifest(driver: ContainerDriver, container: Container) -> Manifest:
    """
    Loads the manifest of an existing container.

    :raises ManifestError: If the manifest is missing or malformed.
    """
    path = manifest_path(driver, container)
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ManifestError(f"Failed to read manifest {path}: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} is not a mapping")
    try:
        return Manifest.from_document(data)
    except ValidationError as e:
        raise ManifestError(f"Invalid manifest {path}: {e}") from e
