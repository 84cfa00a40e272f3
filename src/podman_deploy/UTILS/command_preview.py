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
Human-readable preview of the podman commands setup is going to run.
"""
import shlex
from jinja2 import Template
from ..MODELS.deployment_config import DeploymentConfig
from ..RUNNERS.podman_runner import container_run_args, pod_create_args

PREVIEW_TEMPLATE = """
=== Commands to Create Pods and Containers ===
{% for pod in pods %}
--- Pod: {{ pod.name }} ---
Pod creation command:
{{ pod.command }}

Container creation commands:
{% for container in pod.containers %}# Container: {{ container.name }}
{{ container.command }}
{% endfor %}{% endfor %}"""


class CommandPreview:
    """
    Renders the pod and container commands for a configuration.
    """

    def __init__(self, config: DeploymentConfig, executable: str = "podman"):
        """
        :param config: The deployment configuration.
        :param executable: Runtime binary shown at the start of each command.
        """
        self.config = config
        self.executable = executable
        self.template = Template(PREVIEW_TEMPLATE)

    def _command(self, args) -> str:
        return shlex.join([self.executable, *args])

    def render(self) -> str:
        pods = []
        for pod in self.config.pods:
            pods.append({
                "name": pod.name,
                "command": self._command(pod_create_args(pod.name, pod.published_ports())),
                "containers": [
                    {
                        "name": container.name,
                        "command": self._command(
                            container_run_args(pod.name, container, self.config.data_path)
                        ),
                    }
                    for container in pod.containers
                ],
            })
        return self.template.render(pods=pods)
