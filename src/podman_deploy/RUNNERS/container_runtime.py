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
Interface to the container runtime.

Observed state (existence, current image) is always queried live, never cached.
Mutating calls return nothing on success and raise RuntimeCallFailed otherwise.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from ..MODELS.deployment_config import ContainerSpec


class ContainerRuntime(ABC):
    """
    Capability set the reconciler needs from a container runtime.
    """

    @abstractmethod
    def is_installed(self) -> bool:
        """Whether the runtime binary is present and answers."""

    @abstractmethod
    def pod_exists(self, name: str) -> bool:
        ...

    @abstractmethod
    def container_exists(self, name: str) -> bool:
        ...

    @abstractmethod
    def current_image(self, container_name: str) -> Optional[str]:
        """Image the container was created from, or None if inspection fails."""

    @abstractmethod
    def create_pod(self, name: str, ports: List[str]) -> None:
        ...

    @abstractmethod
    def create_container(self, pod_name: str, container: ContainerSpec, data_path: str) -> None:
        ...

    @abstractmethod
    def pull_image(self, image: str) -> None:
        ...

    @abstractmethod
    def stop_container(self, name: str) -> None:
        ...

    @abstractmethod
    def remove_container(self, name: str) -> None:
        ...

    @abstractmethod
    def start_pod(self, name: str) -> None:
        ...

    @abstractmethod
    def stop_pod(self, name: str) -> None:
        ...

    @abstractmethod
    def is_logged_in(self, registry: str) -> bool:
        ...

    @abstractmethod
    def login(self, registry: str, username: str, password: str) -> None:
        ...
