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
Shared fixtures: a recording in-memory container runtime and config files.
"""
import pytest
import yaml

from podman_deploy.errors import RuntimeCallFailed
from podman_deploy.RUNNERS.container_runtime import ContainerRuntime


class FakeRuntime(ContainerRuntime):
    """
    In-memory runtime that records every call in order.

    pods:        names of existing pods
    containers:  container name -> image it runs (None: exists, inspect fails)
    failures:    (method, target) pairs that should fail
    """

    def __init__(self, installed=True):
        self.installed = installed
        self.pods = set()
        self.containers = {}
        self.logged_in = set()
        self.failures = set()
        self.calls = []

    def fail(self, method, target):
        self.failures.add((method, target))

    def _record(self, method, target, *extra):
        self.calls.append((method, target, *extra))
        if (method, target) in self.failures:
            raise RuntimeCallFailed(method, target)

    def mutating_calls(self):
        queries = {"is_installed", "pod_exists", "container_exists", "current_image", "is_logged_in"}
        return [c for c in self.calls if c[0] not in queries]

    def is_installed(self):
        self.calls.append(("is_installed", None))
        return self.installed

    def pod_exists(self, name):
        self.calls.append(("pod_exists", name))
        return name in self.pods

    def container_exists(self, name):
        self.calls.append(("container_exists", name))
        return name in self.containers

    def current_image(self, container_name):
        self.calls.append(("current_image", container_name))
        return self.containers.get(container_name)

    def create_pod(self, name, ports):
        self._record("create_pod", name, sorted(ports))
        self.pods.add(name)

    def create_container(self, pod_name, container, data_path):
        self._record("create_container", container.name, pod_name)
        self.containers[container.name] = container.image

    def pull_image(self, image):
        self._record("pull_image", image)

    def stop_container(self, name):
        self._record("stop_container", name)

    def remove_container(self, name):
        self._record("remove_container", name)
        self.containers.pop(name, None)

    def start_pod(self, name):
        self._record("start_pod", name)

    def stop_pod(self, name):
        self._record("stop_pod", name)

    def is_logged_in(self, registry):
        self.calls.append(("is_logged_in", registry))
        return registry in self.logged_in

    def login(self, registry, username, password):
        self._record("login", registry, username)
        self.logged_in.add(registry)


@pytest.fixture
def fake_runtime():
    return FakeRuntime()


@pytest.fixture
def config_data(tmp_path):
    """A two-pod document whose data path lives under tmp_path."""
    return {
        'application_name': 'shop',
        'is_podman_installed': True,
        'data_path': str(tmp_path / "data"),
        'pods': [
            {
                'name': 'web',
                'containers': [
                    {
                        'name': 'nginx',
                        'image': 'docker.io/library/nginx:1.25',
                        'mounts': ['/nginx/nginx.conf:/etc/nginx/nginx.conf', '/nginx/html:/usr/share/nginx/html'],
                        'env_vars': {'TZ': 'UTC'},
                        'ports': ['8080:80', '8443:443'],
                    },
                    {
                        'name': 'app',
                        'image': 'registry.example.com/shop/app:2.1.0',
                        'mounts': ['/app/logs:/var/log/app'],
                        'env_vars': {'DB_HOST': 'localhost', 'DEBUG': 'false'},
                        'ports': ['8080:80', '9000:9000'],
                    },
                ],
            },
            {
                'name': 'db',
                'containers': [
                    {
                        'name': 'postgres',
                        'image': 'docker.io/library/postgres:16',
                        'mounts': ['/pg/data:/var/lib/postgresql/data'],
                        'env_vars': {'POSTGRES_PASSWORD': 'secret'},
                        'ports': ['5432:5432'],
                    },
                ],
            },
        ],
    }


@pytest.fixture
def write_config(tmp_path):
    """Writes a config dict as YAML and returns its path."""
    def _write(data, name="config.yaml"):
        path = tmp_path / name
        with open(path, 'w') as f:
            yaml.safe_dump(data, f, sort_keys=False)
        return str(path)
    return _write
