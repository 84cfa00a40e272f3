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
Locating, parsing and rewriting the deployment config.yaml.
"""
import os
import yaml
from typing import List, Optional
from pydantic import ValidationError
from ..MODELS.deployment_config import DeploymentConfig
from ..errors import ConfigNotFound, ConfigParseError

APP_DIR_NAME = "podman_deploy"
CONFIG_FILE_NAME = "config.yaml"

# Implicit YAML 1.1 types that rewrite hand-written scalars such as
# `3000:30` (base 60), `yes` (bool) or `1.10` (float).
_LITERAL_TAGS = {
    "tag:yaml.org,2002:bool",
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:float",
    "tag:yaml.org,2002:timestamp",
}


class ConfigYamlLoader(yaml.SafeLoader):
    """
    SafeLoader that keeps plain scalars as the strings the operator wrote.
    Only `null` is still resolved implicitly.
    """


ConfigYamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _LITERAL_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def default_search_paths(app_dir: str = APP_DIR_NAME) -> List[str]:
    """
    Locations searched for the config file, in priority order.
    """
    return [
        os.path.join(os.path.expanduser("~"), ".config", app_dir, CONFIG_FILE_NAME),
        os.path.join("/etc", app_dir, CONFIG_FILE_NAME),
        os.path.join(".", CONFIG_FILE_NAME),
    ]


class ConfigLoader:
    """
    Loads and persists the desired-state document.
    """
    def __init__(self, search_paths: Optional[List[str]] = None):
        """
        Initializes the loader.

        :param search_paths: Fallback locations tried when no explicit path is given.
        """
        self.search_paths = search_paths if search_paths is not None else default_search_paths()

    def find_config(self, override: Optional[str] = None) -> str:
        """
        Resolves which config file to use.

        :param override: Explicit path; when given it must exist, no fallback is tried.
        :return: Path to an existing config file.
        :raises ConfigNotFound: If nothing usable exists.
        """
        if override:
            if os.path.isfile(override):
                return override
            raise ConfigNotFound(f"Config file not found at specified path: {override}")

        for path in self.search_paths:
            if os.path.isfile(path):
                print(f"Found config file at: {path}")
                return path

        raise ConfigNotFound(
            "Config file not found in any of the search locations: " + ", ".join(self.search_paths)
        )

    def load(self, config_path: str) -> DeploymentConfig:
        """
        Parses a config file from a path.

        :param config_path: Path to the config file.
        :return: Parsed configuration.
        """
        print(f"Loading configuration from {config_path}...")
        try:
            with open(config_path, 'r') as f:
                content = f.read()
        except OSError as e:
            raise ConfigNotFound(f"Cannot read config file {config_path}: {e}") from e
        config = self.parse_from_string(content, source=config_path)
        print("Configuration loaded successfully.")
        return config

    def parse_from_string(self, content: str, source: str = "<string>") -> DeploymentConfig:
        """
        Parses a config document from a string.

        :param content: YAML content of the config file.
        :param source: Name used in error messages.
        """
        try:
            data = yaml.load(content, Loader=ConfigYamlLoader)
        except yaml.YAMLError as e:
            raise ConfigParseError(source, f"invalid YAML: {e}") from e

        if not isinstance(data, dict):
            raise ConfigParseError(source, "top level must be a mapping")

        try:
            return DeploymentConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigParseError(source, self._describe(e)) from e

    def save(self, config: DeploymentConfig, config_path: str):
        """
        Rewrites the config file from the model. Formatting and comments are not preserved.
        """
        data = config.model_dump(mode='json', exclude_none=True)
        with open(config_path, 'w') as f:
            yaml.safe_dump(data, f, sort_keys=False, default_flow_style=False)

    def mark_installed(self, config: DeploymentConfig, config_path: str):
        """
        Records a verified podman installation and writes it back immediately.
        """
        config.is_podman_installed = True
        self.save(config, config_path)
        print("Config file updated: is_podman_installed set to true")

    @staticmethod
    def _describe(error: ValidationError) -> str:
        parts = []
        for err in error.errors():
            location = ".".join(str(p) for p in err.get('loc', ()))
            parts.append(f"{location}: {err.get('msg')}" if location else err.get('msg', ''))
        return "; ".join(parts)
