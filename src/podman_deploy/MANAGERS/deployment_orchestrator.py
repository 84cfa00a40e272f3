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
The four operating modes: setup, upgrade, start and stop.

Each mode is a fixed sequence run once per invocation. Failures on an
explicitly named pod or container propagate; failures of single items in
the all-pods/all-containers variants are printed as warnings and the loop
moves on.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from ..MODELS.deployment_config import DeploymentConfig
from ..PARSERS.config_loader import ConfigLoader
from ..RUNNERS.container_runtime import ContainerRuntime
from ..UTILS.command_preview import CommandPreview
from ..errors import NotFound, RuntimeCallFailed
from .installer import PodmanInstaller
from .path_materializer import PathMaterializer
from .reconciler import Reconciler


@dataclass
class ModeReport:
    """What a mode did, for the final summary."""

    mode: str
    created_pods: List[str] = field(default_factory=list)
    upgraded: List[str] = field(default_factory=list)
    pulled: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class DeploymentOrchestrator:
    """
    Runs the operating modes against one loaded configuration.
    """
    def __init__(self,
                 config: DeploymentConfig,
                 config_path: str,
                 runtime: ContainerRuntime,
                 installer: Optional[PodmanInstaller] = None,
                 loader: Optional[ConfigLoader] = None):
        """
        Initializes the orchestrator.

        :param config: Configuration loaded for this invocation.
        :param config_path: File the config came from; the installed flag is written back there.
        :param runtime: Container runtime to drive.
        """
        self.config = config
        self.config_path = config_path
        self.runtime = runtime
        self.installer = installer or PodmanInstaller(runtime, loader=loader)
        self.materializer = PathMaterializer(config.data_path)
        self.reconciler = Reconciler(runtime, config.data_path)

    def _warn(self, report: ModeReport, message: str):
        print(f"Warning: {message}")
        report.warnings.append(message)

    def setup(self) -> ModeReport:
        """
        Installs podman if needed, prepares mount paths, creates missing pods,
        pulls every image and leaves all pods and containers stopped.
        """
        print("=== Running Setup Mode ===")
        report = ModeReport(mode="setup")

        print("\nStep 1: Checking Podman installation...")
        self.installer.ensure_installed(self.config, self.config_path)

        print("\nStep 2: Checking and creating data path...")
        self.materializer.ensure_data_path()
        self.materializer.materialize(self.config)

        print("\nConfiguring private registry...")
        try:
            self.reconciler.configure_registry(self.config)
        except RuntimeCallFailed as e:
            self._warn(report, f"Error configuring private registry: {e}")

        print("\nStep 3: Creating pods...")
        print(CommandPreview(self.config).render())
        report.created_pods = self.reconciler.ensure_pods(self.config)

        print("\nStep 4: Pulling all required images...")
        self._pull_images(report)

        print("\nStep 5: Stopping containers and pods...")
        self._stop_everything(report)

        print("\n=== Setup completed successfully ===")
        return report

    def _pull_images(self, report: ModeReport):
        for image in self.config.distinct_images():
            print(f"Pulling image: {image}")
            try:
                self.runtime.pull_image(image)
            except RuntimeCallFailed:
                self._warn(report, f"Failed to pull image: {image}")
                continue
            print(f"Successfully pulled image: {image}")
            report.pulled.append(image)
        print("Image pulling process completed")

    def _stop_everything(self, report: ModeReport):
        print("Stopping all containers and pods...")
        for _, container in self.config.all_containers():
            print(f"Stopping container: {container.name}")
            try:
                self.runtime.stop_container(container.name)
            except RuntimeCallFailed:
                self._warn(report, f"Failed to stop container '{container.name}' (may not be running)")

        for pod in self.config.pods:
            print(f"Stopping pod: {pod.name}")
            try:
                self.runtime.stop_pod(pod.name)
            except RuntimeCallFailed:
                self._warn(report, f"Failed to stop pod '{pod.name}' (may not be running)")
        print("All containers and pods stopped")

    def upgrade(self, container_name: Optional[str] = None) -> ModeReport:
        """
        Recreates containers whose running image differs from the config.

        :param container_name: Only check this container; it must be in the config.
        :raises NotFound: If the named container is not configured.
        """
        print("=== Running Upgrade Mode ===")
        report = ModeReport(mode="upgrade")

        if container_name is not None:
            print(f"Upgrading specific container: {container_name}")
            found = self.config.find_container(container_name)
            if found is None:
                raise NotFound("container", container_name)
            pod, container = found
            print(f"\nChecking container '{container.name}' in pod '{pod.name}'")
            if self.reconciler.reconcile_container(pod, container):
                report.upgraded.append(container.name)
        else:
            print("Upgrading all containers...")
            for pod in self.config.pods:
                print(f"\nChecking pod: {pod.name}")
                for container in pod.containers:
                    try:
                        if self.reconciler.reconcile_container(pod, container):
                            report.upgraded.append(container.name)
                    except RuntimeCallFailed as e:
                        self._warn(report, f"Upgrade of container '{container.name}' aborted: {e}")

        if report.upgraded:
            print("\nUpgrade process completed successfully!")
        else:
            print("\nNo containers needed upgrading - all are up to date!")
        print("=== Upgrade completed successfully ===")
        return report

    def start(self, pod_name: Optional[str] = None) -> ModeReport:
        """
        Starts one pod, or all pods.

        :raises NotFound: If the named pod is not configured.
        """
        print("=== Running Start Mode ===")
        report = ModeReport(mode="start")

        if pod_name is not None:
            print(f"Starting specific pod: {pod_name}")
            if self.config.find_pod(pod_name) is None:
                raise NotFound("pod", pod_name)
            self.runtime.start_pod(pod_name)
            print(f"Pod '{pod_name}' started successfully")
        else:
            print("Starting all pods...")
            for pod in self.config.pods:
                print(f"Starting pod: {pod.name}")
                try:
                    self.runtime.start_pod(pod.name)
                except RuntimeCallFailed:
                    self._warn(report, f"Failed to start pod '{pod.name}' "
                                       "(may not exist or already running)")
                    continue
                print(f"Pod '{pod.name}' started successfully")
            print("All pods started")

        print("=== Start completed successfully ===")
        return report

    def stop(self, pod_name: Optional[str] = None) -> ModeReport:
        """
        Stops one pod, or every container and then every pod.

        :raises NotFound: If the named pod is not configured.
        """
        print("=== Running Stop Mode ===")
        report = ModeReport(mode="stop")

        if pod_name is not None:
            print(f"Stopping specific pod: {pod_name}")
            if self.config.find_pod(pod_name) is None:
                raise NotFound("pod", pod_name)
            self.runtime.stop_pod(pod_name)
            print(f"Pod '{pod_name}' stopped successfully")
        else:
            self._stop_everything(report)

        print("=== Stop completed successfully ===")
        return report
