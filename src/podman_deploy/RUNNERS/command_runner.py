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
Blocking execution of external commands, reporting only exit status and output.
"""
import subprocess
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class CommandResult:
    """Outcome of one external command."""

    command: List[str]
    returncode: int
    stdout: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """
    Runs one command at a time and waits for it to exit.
    """

    # Reported when the executable itself cannot be started
    NOT_STARTED = 127

    def run(self,
            command: List[str],
            capture: bool = False,
            input_text: Optional[str] = None) -> CommandResult:
        """
        Runs a command to completion.

        Args:
            command (List[str]): Executable and arguments.
            capture (bool): Capture stdout instead of letting it reach the terminal.
            input_text (Optional[str]): Data written to the command's stdin.

        Returns:
            CommandResult: Exit status and, when captured, stdout.
        """
        try:
            completed = subprocess.run(
                command,
                input=input_text,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.DEVNULL if capture else None,
                text=True,
                # Avoid shell=True for security reasons (CWE-78)
                shell=False,
                check=False,
            )
        except (FileNotFoundError, PermissionError) as e:
            print(f"Warning: could not execute {command[0]}: {e}")
            return CommandResult(command=command, returncode=self.NOT_STARTED)

        return CommandResult(
            command=command,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
        )
