"""Starting and killing child processes together with their descendants."""

import os
import signal
import subprocess
import sys

_POWERSHELL_FLAGS = ("-NoLogo", "-NoProfile", "-NonInteractive", "-ExecutionPolicy", "RemoteSigned")

# taskkill reports ERROR_WAIT_NO_CHILDREN when the process is already gone.
_TASKKILL_NO_PROCESS = 128


class ProcessNotStartedError(RuntimeError):
    """Raised when a command that was never started is asked to act on its process."""


class Command:
    """A program and its arguments that runs in its own process group."""

    def __init__(self, name: str, *args: str) -> None:
        self.name = name
        self.args = list(args)
        self.process = None

    def __repr__(self) -> str:
        return f"Command({' '.join([self.name, *self.args])!r})"

    def start(self) -> None:
        """Start the process."""
        options = {}
        if os.name == "posix":
            options["start_new_session"] = True
        self.process = subprocess.Popen([self.name, *self.args], **options)

    def wait(self) -> int:
        """Wait for the process to exit and return its exit status."""
        if self.process is None:
            raise ProcessNotStartedError(f"{self!r} does not have a process handle")
        return self.process.wait()

    def kill(self) -> None:
        """Kill the process and all of its children."""
        if self.process is None:
            raise ProcessNotStartedError(f"{self!r} does not have a process handle")
        if os.name == "posix":
            os.killpg(self.process.pid, signal.SIGKILL)
            return
        result = subprocess.run(
            ["TASKKILL", "/T", "/F", "/PID", str(self.process.pid)],
            stdout=sys.stdout,
            stderr=sys.stderr,
            check=False,
        )
        if result.returncode not in (0, _TASKKILL_NO_PROCESS):
            raise subprocess.CalledProcessError(result.returncode, result.args)


def powershell(*args: str) -> Command:
    """Build a non-interactive PowerShell command."""
    return Command("powershell.exe", *_POWERSHELL_FLAGS, *args)


def build_command(name: str, *args: str) -> Command:
    """Build a command; on Windows scripts are run through their shell."""
    if os.name != "nt":
        return Command(name, *args)

    name = os.path.normpath(name)
    ext = os.path.splitext(name)[1].lower()
    if ext in (".cmd", ".bat"):
        return Command("cmd.exe", "/C", name, *args)
    if ext == ".ps1":
        return powershell(name, *args)
    return Command(name, *args)