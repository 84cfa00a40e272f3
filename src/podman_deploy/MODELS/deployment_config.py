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
Models for the desired-state document: pods, their containers and the
registry the images come from.
"""
from typing import List, Dict, Optional, Tuple
from pydantic import BaseModel, field_validator, model_validator


def split_mount(mount: str) -> Tuple[str, str]:
    """
    Splits a mount spec into its host-relative and container parts.

    :param mount: Mount spec in the form ``/local/path:/container/path``.
    :return: Tuple of (local, container).
    """
    local, _, container = mount.partition(':')
    return local, container


class ContainerSpec(BaseModel):
    """
    A single container inside a pod.
    """
    name: str
    image: str

    # "local:container", local side is relative to the data path
    mounts: List[str] = []
    env_vars: Dict[str, str] = {}
    # "host:container"
    ports: List[str] = []

    @field_validator('name', 'image')
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator('mounts')
    @classmethod
    def mounts_have_both_sides(cls, v: List[str]) -> List[str]:
        for mount in v:
            if ':' not in mount:
                raise ValueError(f"mount '{mount}' must be in the form local:container")
        return v

    @field_validator('env_vars', mode='before')
    @classmethod
    def empty_env_values(cls, v):
        # `KEY:` with nothing after it loads as None
        if isinstance(v, dict):
            return {k: ('' if val is None else val) for k, val in v.items()}
        return v

    def resolved_mounts(self, data_path: str) -> List[str]:
        """
        Mount arguments as passed to the runtime, host side prefixed with the data path.
        """
        resolved = []
        for mount in self.mounts:
            local, container = split_mount(mount)
            resolved.append(f"{data_path}{local}:{container}")
        return resolved


class PodSpec(BaseModel):
    """
    A named group of containers sharing network namespace and published ports.
    """
    name: str
    containers: List[ContainerSpec] = []

    @model_validator(mode='after')
    def unique_container_names(self) -> 'PodSpec':
        seen = set()
        for container in self.containers:
            if container.name in seen:
                raise ValueError(f"duplicate container '{container.name}' in pod '{self.name}'")
            seen.add(container.name)
        return self

    def published_ports(self) -> List[str]:
        """
        Union of the ports of every container in the pod, duplicates collapsed.

        :return: Distinct port specs in first-declared order.
        """
        ports: List[str] = []
        for container in self.containers:
            for port in container.ports:
                if port not in ports:
                    ports.append(port)
        return ports


class RegistryCredentials(BaseModel):
    """Login details for a private registry."""
    registry: str
    username: str
    password: str


class DeploymentConfig(BaseModel):
    """
    Complete desired state for one application.
    Equivalent to a parsed config.yaml file.
    """
    application_name: str
    is_podman_installed: bool = False
    data_path: str
    pods: List[PodSpec] = []

    private_registry: Optional[str] = None
    registry_username: Optional[str] = None
    registry_password: Optional[str] = None

    @model_validator(mode='after')
    def unique_pod_names(self) -> 'DeploymentConfig':
        seen = set()
        for pod in self.pods:
            if pod.name in seen:
                raise ValueError(f"duplicate pod '{pod.name}'")
            seen.add(pod.name)
        return self

    def find_pod(self, name: str) -> Optional[PodSpec]:
        for pod in self.pods:
            if pod.name == name:
                return pod
        return None

    def find_container(self, name: str) -> Optional[Tuple[PodSpec, ContainerSpec]]:
        """
        Locates a container by name, first match across pods in document order.

        :return: The owning pod and the container, or None.
        """
        for pod in self.pods:
            for container in pod.containers:
                if container.name == name:
                    return pod, container
        return None

    def all_containers(self) -> List[Tuple[PodSpec, ContainerSpec]]:
        return [(pod, container) for pod in self.pods for container in pod.containers]

    def distinct_images(self) -> List[str]:
        images: List[str] = []
        for _, container in self.all_containers():
            if container.image not in images:
                images.append(container.image)
        return images

    def registry_credentials(self) -> Optional[RegistryCredentials]:
        """
        Credentials for the private registry, only when both username and password are set.
        """
        if self.private_registry and self.registry_username and self.registry_password:
            return RegistryCredentials(
                registry=self.private_registry,
                username=self.registry_username,
                password=self.registry_password,
            )
        return None
