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
Converges the runtime towards the desired state in the config.

Two decisions live here: whether a pod has to be created (absence only,
existing pods are never diffed) and whether a container drifted from its
configured image and has to be recreated.
"""
from typing import List

from ..MODELS.deployment_config import ContainerSpec, DeploymentConfig, PodSpec
from ..RUNNERS.container_runtime import ContainerRuntime


class Reconciler:
    """
    Compares config against live runtime state and applies the missing actions.
    """
    def __init__(self, runtime: ContainerRuntime, data_path: str):
        """
        Initializes the reconciler.

        :param runtime: Runtime that is queried and mutated.
        :param data_path: Prefix for the host side of every mount.
        """
        self.runtime = runtime
        self.data_path = data_path

    def ensure_pods(self, config: DeploymentConfig) -> List[str]:
        """
        Creates every pod that does not exist yet, together with its containers.
        Pods that already exist are left untouched, containers included.

        :return: Names of the pods created by this call.
        """
        print("Checking and creating pods...")
        created = []
        for pod in config.pods:
            if self.runtime.pod_exists(pod.name):
                print(f"Pod '{pod.name}' already exists")
                continue
            print(f"Pod '{pod.name}' does not exist, creating it...")
            self.create_pod(pod)
            created.append(pod.name)
        print("All pods checked and created as needed")
        return created

    def create_pod(self, pod: PodSpec):
        """
        Creates the pod publishing the union of its containers' ports, then its containers.
        """
        print(f"Creating pod: {pod.name}")
        self.runtime.create_pod(pod.name, pod.published_ports())
        print(f"Pod '{pod.name}' created successfully")
        for container in pod.containers:
            self.create_container(pod, container)

    def create_container(self, pod: PodSpec, container: ContainerSpec):
        print(f"Creating container '{container.name}' in pod '{pod.name}'")
        self.runtime.create_container(pod.name, container, self.data_path)
        print(f"Container '{container.name}' created successfully in pod '{pod.name}'")

    def needs_upgrade(self, container: ContainerSpec) -> bool:
        """
        Decides whether a container drifted from its configured image.

        A container missing from the runtime is not drift. When it exists but
        its image cannot be read, it is treated as drifted.
        """
        if not self.runtime.container_exists(container.name):
            print(f"Container '{container.name}' does not exist, no upgrade needed")
            return False

        current = self.runtime.current_image(container.name)
        if current is None:
            print(f"Could not determine current image for container '{container.name}', "
                  "assuming upgrade needed")
            return True

        if current == container.image:
            print(f"Container '{container.name}' is already using the correct image: {current}")
            return False

        print(f"Container '{container.name}' needs upgrade: "
              f"current='{current}', expected='{container.image}'")
        return True

    def upgrade_container(self, pod: PodSpec, container: ContainerSpec):
        """
        Replaces a container with one built from the configured image.
        Order is pull, stop, remove, create; the first failure stops the sequence.

        :raises RuntimeCallFailed: From whichever step failed.
        """
        print(f"Upgrading container '{container.name}' in pod '{pod.name}'")
        print(f"Pulling image: {container.image}")
        self.runtime.pull_image(container.image)
        print(f"Stopping container: {container.name}")
        self.runtime.stop_container(container.name)
        print(f"Removing container: {container.name}")
        self.runtime.remove_container(container.name)
        self.create_container(pod, container)
        print(f"Container '{container.name}' upgraded successfully")

    def reconcile_container(self, pod: PodSpec, container: ContainerSpec) -> bool:
        """
        Upgrades the container if it drifted.

        :return: True if the container was replaced.
        """
        if not self.needs_upgrade(container):
            return False
        self.upgrade_container(pod, container)
        return True

    def configure_registry(self, config: DeploymentConfig):
        """
        Logs into the private registry unless already authenticated.

        :raises RuntimeCallFailed: If the login itself fails.
        """
        if not config.private_registry:
            print("No private registry configured.")
            return

        registry = config.private_registry
        print(f"Private registry configured: {registry}")
        credentials = config.registry_credentials()
        if credentials is None:
            print(f"Note: Use 'podman login {registry}' to authenticate with the registry when needed.")
            return

        print(f"Registry authentication details available for user: {credentials.username}")
        if self.runtime.is_logged_in(registry):
            print(f"Already logged into registry: {registry}")
            return

        print("Not logged into registry, attempting login...")
        self.runtime.login(registry, credentials.username, credentials.password)
        print(f"Successfully logged into registry: {registry}")
