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
Unit tests for OS detection and podman installation.
"""
import pytest
import yaml
from podman_deploy.MANAGERS.installer import OSType, PodmanInstaller, detect_os, install_commands
from podman_deploy.PARSERS.config_loader import ConfigLoader
from podman_deploy.RUNNERS.command_runner import CommandRunner, CommandResult
from podman_deploy.errors import RuntimeCallFailed, UnsupportedPlatform


class PackageManagerStub(CommandRunner):
    """Records install commands; optionally fails one of them."""

    def __init__(self, failing=None, on_success=None):
        self.failing = failing
        self.on_success = on_success
        self.commands = []

    def run(self, command, capture=False, input_text=None):
        self.commands.append(command)
        if command == self.failing:
            return CommandResult(command=command, returncode=100)
        if self.on_success:
            self.on_success()
        return CommandResult(command=command, returncode=0)


def _os_release(tmp_path, content):
    path = tmp_path / "os-release"
    path.write_text(content)
    return str(path)


class TestDetectOS:
    """Tests for detect_os."""

    @pytest.mark.parametrize("content,expected", [
        ('NAME="Ubuntu"\nID=ubuntu\n', OSType.UBUNTU),
        ('PRETTY_NAME="Debian GNU/Linux 12 (bookworm)"\nID=debian\n', OSType.DEBIAN),
        ('NAME="Fedora Linux"\nID=fedora\n', OSType.FEDORA),
        ('NAME="Red Hat Enterprise Linux"\nID="rhel"\n', OSType.REDHAT),
        ('NAME="CentOS Stream"\nID="centos"\n', OSType.REDHAT),
        ('NAME="Arch Linux"\nID=arch\n', OSType.ARCH),
        ('NAME="Alpine Linux"\nID=alpine\n', OSType.UNKNOWN),
    ])
    def test_detect(self, tmp_path, content, expected):
        assert detect_os(_os_release(tmp_path, content)) == expected

    def test_ubuntu_wins_over_debian_like(self, tmp_path):
        path = _os_release(tmp_path, 'ID=ubuntu\nID_LIKE=debian\n')
        assert detect_os(path) == OSType.UBUNTU

    def test_unreadable_file(self, tmp_path):
        assert detect_os(str(tmp_path / "absent")) == OSType.UNKNOWN


class TestInstallCommands:
    """Tests for the per-distribution command templates."""

    def test_apt_updates_first(self):
        assert install_commands(OSType.DEBIAN) == [
            ["sudo", "apt", "update"],
            ["sudo", "apt", "install", "-y", "podman"],
        ]

    def test_arch(self):
        assert install_commands(OSType.ARCH) == [["sudo", "pacman", "-S", "--noconfirm", "podman"]]

    def test_unknown_is_unsupported(self):
        with pytest.raises(UnsupportedPlatform):
            install_commands(OSType.UNKNOWN)


class TestPodmanInstaller:
    """Tests for PodmanInstaller.ensure_installed."""

    def _load(self, write_config, config_data, installed):
        config_data['is_podman_installed'] = installed
        path = write_config(config_data)
        return ConfigLoader().load(path), path

    def _flag_on_disk(self, path):
        with open(path) as f:
            return yaml.safe_load(f)['is_podman_installed']

    def test_flag_set_skips_probe(self, fake_runtime, write_config, config_data):
        config, path = self._load(write_config, config_data, installed=True)
        runner = PackageManagerStub()
        installed = PodmanInstaller(fake_runtime, runner=runner).ensure_installed(config, path)
        assert installed is False
        assert fake_runtime.calls == []
        assert runner.commands == []

    def test_already_installed_persists_flag(self, fake_runtime, write_config, config_data):
        config, path = self._load(write_config, config_data, installed=False)
        runner = PackageManagerStub()
        PodmanInstaller(fake_runtime, runner=runner).ensure_installed(config, path)
        assert config.is_podman_installed is True
        assert self._flag_on_disk(path) is True
        assert runner.commands == []

    def test_installs_then_verifies(self, tmp_path, fake_runtime, write_config, config_data):
        config, path = self._load(write_config, config_data, installed=False)
        fake_runtime.installed = False

        def podman_appears():
            fake_runtime.installed = True
        runner = PackageManagerStub(on_success=podman_appears)
        installer = PodmanInstaller(
            fake_runtime, runner=runner,
            os_release_path=_os_release(tmp_path, 'ID=fedora\n'),
        )

        assert installer.ensure_installed(config, path) is True
        assert runner.commands == [["sudo", "dnf", "install", "-y", "podman"]]
        assert self._flag_on_disk(path) is True

    def test_unsupported_os_leaves_flag_alone(self, tmp_path, fake_runtime, write_config, config_data):
        config, path = self._load(write_config, config_data, installed=False)
        fake_runtime.installed = False
        installer = PodmanInstaller(
            fake_runtime, runner=PackageManagerStub(),
            os_release_path=_os_release(tmp_path, 'ID=plan9\n'),
        )
        with pytest.raises(UnsupportedPlatform):
            installer.ensure_installed(config, path)
        assert config.is_podman_installed is False
        assert self._flag_on_disk(path) is False

    def test_package_manager_failure_is_fatal(self, tmp_path, fake_runtime, write_config, config_data):
        config, path = self._load(write_config, config_data, installed=False)
        fake_runtime.installed = False
        runner = PackageManagerStub(failing=["sudo", "apt", "update"])
        installer = PodmanInstaller(
            fake_runtime, runner=runner,
            os_release_path=_os_release(tmp_path, 'ID=ubuntu\n'),
        )
        with pytest.raises(RuntimeCallFailed):
            installer.ensure_installed(config, path)
        # install step never attempted after update failed
        assert runner.commands == [["sudo", "apt", "update"]]
        assert self._flag_on_disk(path) is False

    def test_install_not_verified_leaves_flag_alone(self, tmp_path, fake_runtime, write_config, config_data):
        config, path = self._load(write_config, config_data, installed=False)
        fake_runtime.installed = False
        installer = PodmanInstaller(
            fake_runtime, runner=PackageManagerStub(),
            os_release_path=_os_release(tmp_path, 'ID=arch\n'),
        )
        with pytest.raises(RuntimeCallFailed):
            installer.ensure_installed(config, path)
        assert self._flag_on_disk(path) is False
