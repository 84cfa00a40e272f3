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
OS detection and podman installation through the distribution's package manager.
"""
from enum import Enum
from typing import Dict, List, Optional

from ..MODELS.deployment_config import DeploymentConfig
from ..PARSERS.config_loader import ConfigLoader
from ..RUNNERS.command_runner import CommandRunner
from ..RUNNERS.container_runtime import ContainerRuntime
from ..errors import RuntimeCallFailed, UnsupportedPlatform

OS_RELEASE_PATH = "/etc/os-release"


class OSType(str, Enum):
    """Distributions podman can be installed on automatically."""

    UBUNTU = "ubuntu"
    DEBIAN = "debian"
    FEDORA = "fedora"
    REDHAT = "redhat"
    ARCH = "arch"
    UNKNOWN = "unknown"


INSTALL_COMMANDS: Dict[OSType, List[List[str]]] = {
    OSType.UBUNTU: [
        ["sudo", "apt", "update"],
        ["sudo", "apt", "install", "-y", "podman"],
    ],
    OSType.DEBIAN: [
        ["sudo", "apt", "update"],
        ["sudo", "apt", "install", "-y", "podman"],
    ],
    OSType.FEDORA: [["sudo", "dnf", "install", "-y", "podman"]],
    OSType.REDHAT: [["sudo", "yum", "install", "-y", "podman"]],
    OSType.ARCH: [["sudo", "pacman", "-S", "--noconfirm", "podman"]],
}

# Checked in order; first hit wins
_OS_MARKERS = [
    (OSType.UBUNTU, ("ubuntu",)),
    (OSType.DEBIAN, ("debian",)),
    (OSType.FEDORA, ("fedora",)),
    (OSType.REDHAT, ("red hat", "rhel", "centos")),
    (OSType.ARCH, ("arch",)),
]


def detect_os(os_release_path: str = OS_RELEASE_PATH) -> OSType:
    """
    Identifies the distribution from os-release.

    :param os_release_path: Path to the os-release file.
    :return: Matching OSType, UNKNOWN if unreadable or unrecognized.
    """
    try:
        with open(os_release_path, 'r') as f:
            content = f.read().lower()
    except OSError:
        return OSType.UNKNOWN

    for os_type, markers in _OS_MARKERS:
        if any(marker in content for marker in markers):
            return os_type
    return OSType.UNKNOWN


def install_commands(os_type: OSType) -> List[List[str]]:
    """
    :raises UnsupportedPlatform: For OSType.UNKNOWN.
    """
    if os_type not in INSTALL_COMMANDS:
        raise UnsupportedPlatform(os_type.value)
    return INSTALL_COMMANDS[os_type]


class PodmanInstaller:
    """
    Ensures podman is available and records that in the config file.
    """
    def __init__(self,
                 runtime: ContainerRuntime,
                 loader: Optional[ConfigLoader] = None,
                 runner: Optional[CommandRunner] = None,
                 os_release_path: str = OS_RELEASE_PATH):
        self.runtime = runtime
        self.loader = loader or ConfigLoader()
        self.runner = runner or CommandRunner()
        self.os_release_path = os_release_path

    def ensure_installed(self, config: DeploymentConfig, config_path: str) -> bool:
        """
        Skips when the config already records an installation, otherwise probes
        and installs as needed. The flag is only persisted after a live check passes.

        :return: True if an installation was performed.
        """
        if config.is_podman_installed:
            print("Config indicates podman is installed, skipping installation check.")
            return False

        if self.runtime.is_installed():
            print("Podman is already installed.")
            self.loader.mark_installed(config, config_path)
            return False

        print("Podman is not installed. Detecting OS...")
        os_type = detect_os(self.os_release_path)
        print(f"Detected OS: {os_type.value}")
        self.install(os_type)

        if not self.runtime.is_installed():
            raise RuntimeCallFailed("install", "podman (not found after installation)")
        self.loader.mark_installed(config, config_path)
        return True

    def install(self, os_type: OSType):
        commands = install_commands(os_type)
        print(f"Installing podman for {os_type.value}...")
        for command in commands:
            result = self.runner.run(command)
            if not result.ok:
                raise RuntimeCallFailed("install", " ".join(command))
        print("Podman installed successfully!")
