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
Exceptions raised by podman-deploy.
"""


class PodmanDeployError(Exception):
    """Base exception for every failure the CLI reports to the operator."""


class ConfigError(PodmanDeployError):
    """The configuration document could not be used."""


class ConfigNotFound(ConfigError):
    """No configuration document exists at any searched location."""


class ConfigParseError(ConfigError):
    """The configuration document is malformed or misses required fields."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid configuration in {path}: {reason}")
        self.path = path
        self.reason = reason


class UnsupportedPlatform(PodmanDeployError):
    """Automatic podman installation is not available for this OS."""

    def __init__(self, os_type: str):
        super().__init__(f"Unsupported OS for automatic podman installation: {os_type}")
        self.os_type = os_type


class RuntimeCallFailed(PodmanDeployError):
    """An external command exited with a non-zero status."""

    def __init__(self, operation: str, target: str):
        super().__init__(f"Failed to {operation}: {target}")
        self.operation = operation
        self.target = target


class NotFound(PodmanDeployError):
    """A pod or container named on the command line is not in the configuration."""

    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind.capitalize()} '{name}' not found in configuration")
        self.kind = kind
        self.name = name


class MountPathError(PodmanDeployError):
    """A host path for a mount could not be created."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not create mount path {path}: {reason}")
        self.path = path
        self.reason = reason
