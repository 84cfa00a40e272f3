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
Host-side preparation of mount paths under the data directory.
"""
import os
from enum import Enum
from typing import List, Tuple

from ..MODELS.deployment_config import DeploymentConfig, split_mount
from ..errors import MountPathError

FILE_EXTENSIONS = ("conf", "log", "txt", "json", "yaml", "yml")


class MountKind(str, Enum):
    """What a mount's host side should be materialized as."""

    FILE = "file"
    DIRECTORY = "directory"


def classify_mount_path(local: str) -> MountKind:
    """
    Classifies the local side of a mount.

    :param local: Host-relative path, e.g. ``/cfg/app.conf``.
    :return: FILE for known config/log extensions, DIRECTORY otherwise.
    """
    if '.' in local and local.endswith(tuple(f".{ext}" for ext in FILE_EXTENSIONS)):
        return MountKind.FILE
    return MountKind.DIRECTORY


class PathMaterializer:
    """
    Makes sure every mount's host path exists before containers are created.
    Running it again on the same config changes nothing.
    """
    def __init__(self, data_path: str):
        """
        :param data_path: Prefix joined to each mount's local side by plain concatenation.
        """
        self.data_path = data_path

    def ensure_data_path(self):
        """
        Creates the data directory itself if absent.
        """
        print(f"Checking data path: {self.data_path}")
        if os.path.isdir(self.data_path):
            print(f"Data path already exists: {self.data_path}")
            return
        print(f"Data path does not exist, creating: {self.data_path}")
        self._makedirs(self.data_path)

    def resolve(self, local: str) -> str:
        return f"{self.data_path}{local}"

    def planned_paths(self, config: DeploymentConfig) -> List[Tuple[str, MountKind]]:
        """
        Every host path the config needs, in declaration order.
        """
        paths = []
        for _, container in config.all_containers():
            for mount in container.mounts:
                local, _ = split_mount(mount)
                paths.append((self.resolve(local), classify_mount_path(local)))
        return paths

    def materialize(self, config: DeploymentConfig) -> List[str]:
        """
        Creates missing mount paths for every container of every pod.

        :param config: The deployment configuration.
        :return: Paths that were created by this call.
        """
        print("Creating mount paths within data directory...")
        created = []
        for path, kind in self.planned_paths(config):
            if kind == MountKind.FILE:
                if self._ensure_file(path):
                    created.append(path)
            elif self._ensure_directory(path):
                created.append(path)
        print("All mount paths created successfully")
        return created

    def _ensure_file(self, path: str) -> bool:
        parent = os.path.dirname(path)
        if parent and not os.path.isdir(parent):
            print(f"Creating directory for file: {parent}")
            self._makedirs(parent)

        if os.path.exists(path):
            print(f"File already exists: {path}")
            return False

        print(f"Creating empty file: {path}")
        try:
            # 'x' never truncates a file that appeared in the meantime
            with open(path, 'x'):
                pass
        except FileExistsError:
            return False
        except OSError as e:
            raise MountPathError(path, str(e)) from e
        return True

    def _ensure_directory(self, path: str) -> bool:
        if os.path.exists(path):
            print(f"Directory already exists: {path}")
            return False
        print(f"Creating directory: {path}")
        self._makedirs(path)
        return True

    @staticmethod
    def _makedirs(path: str):
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise MountPathError(path, str(e)) from e
