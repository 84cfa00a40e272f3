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
Container runtime backed by the podman CLI.
"""
from typing import List, Optional

from ..MODELS.deployment_config import ContainerSpec
from ..errors import RuntimeCallFailed
from .command_runner import CommandRunner
from .container_runtime import ContainerRuntime


def pod_create_args(name: str, ports: List[str]) -> List[str]:
    """
    Arguments for ``podman pod create``; every port is published on the pod.
    """
    args = ["pod", "create", "--name", name]
    for port in ports:
        args.extend(["-p", port])
    return args


def container_run_args(pod_name: str, container: ContainerSpec, data_path: str) -> List[str]:
    """
    Arguments for ``podman run`` placing the container inside its pod.
    """
    args = ["run", "-d", "--pod", pod_name, "--name", container.name]
    for key, value in container.env_vars.items():
        args.extend(["-e", f"{key}={value}"])
    for mount in container.resolved_mounts(data_path):
        args.extend(["-v", mount])
    args.append(container.image)
    return args


class PodmanRunner(ContainerRuntime):
    """
    Drives podman through its command line, one blocking call at a time.
    """

    def __init__(self, executable: str = "podman", runner: Optional[CommandRunner] = None):
        """
        Args:
            executable: Name or path of the podman binary.
            runner: Command runner, replaceable in tests.
        """
        self.executable = executable
        self.runner = runner or CommandRunner()

    def _succeeds(self, *args: str) -> bool:
        return self.runner.run([self.executable, *args], capture=True).ok

    def _mutate(self, operation: str, target: str, args: List[str], input_text: Optional[str] = None):
        result = self.runner.run([self.executable, *args], input_text=input_text)
        if not result.ok:
            raise RuntimeCallFailed(operation, target)

    def is_installed(self) -> bool:
        return self._succeeds("--version")

    def pod_exists(self, name: str) -> bool:
        return self._succeeds("pod", "exists", name)

    def container_exists(self, name: str) -> bool:
        return self._succeeds("container", "exists", name)

    def current_image(self, container_name: str) -> Optional[str]:
        result = self.runner.run(
            [self.executable, "inspect", container_name, "--format", "{{.ImageName}}"],
            capture=True,
        )
        if not result.ok:
            return None
        return result.stdout.strip()

    def create_pod(self, name: str, ports: List[str]) -> None:
        self._mutate("create pod", name, pod_create_args(name, ports))

    def create_container(self, pod_name: str, container: ContainerSpec, data_path: str) -> None:
        self._mutate(
            "create container",
            f"{container.name} in pod {pod_name}",
            container_run_args(pod_name, container, data_path),
        )

    def pull_image(self, image: str) -> None:
        self._mutate("pull image", image, ["pull", image])

    def stop_container(self, name: str) -> None:
        self._mutate("stop container", name, ["stop", name])

    def remove_container(self, name: str) -> None:
        self._mutate("remove container", name, ["rm", name])

    def start_pod(self, name: str) -> None:
        self._mutate("start pod", name, ["pod", "start", name])

    def stop_pod(self, name: str) -> None:
        self._mutate("stop pod", name, ["pod", "stop", name])

    def is_logged_in(self, registry: str) -> bool:
        return self._succeeds("login", "--get-login", registry)

    def login(self, registry: str, username: str, password: str) -> None:
        # Password is passed on stdin, never as an argument
        self._mutate(
            "login to registry",
            registry,
            ["login", registry, "-u", username, "--password-stdin"],
            input_text=password,
        )
