"""Interactive hub that drives a monitor which runs hunt management commands."""

from __future__ import annotations

import os
import subprocess
import sys
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TextIO

from .records import TREASURE_FILE
from .score import format_scores, score_hunt

MAX_COMMAND_ARGS = 8

INVALID_COMMAND = (
    "Invalid Command\n\nTry:\nstart_monitor\nlist_hunts\nlist_treasures\n"
    "view_treasure\nstop_monitor\ncalculate_score\nexit\n\n"
)


def hunt_directories(root=None) -> List[Path]:
    """Return the directories under root that hold a regular treasure file, by name."""
    base = Path(root) if root is not None else Path(".")
    return sorted(
        (
            entry
            for entry in base.iterdir()
            if entry.is_dir() and (entry / TREASURE_FILE).is_file()
        ),
        key=lambda p: p.name,
    )


def _split_command(args: Sequence[str]) -> List[str]:
    tokens = [token for token in " ".join(args).split(" ") if token]
    return tokens[:MAX_COMMAND_ARGS]


class Monitor:
    """Runs management commands on request and shuts down after a grace delay."""

    def __init__(
        self,
        out: Optional[TextIO] = None,
        root=None,
        shutdown_delay: float = 10.0,
        manager_command: Optional[Sequence[str]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.out = out if out is not None else sys.stdout
        self.root = Path(root) if root is not None else Path(".")
        self.shutdown_delay = shutdown_delay
        self._custom_command = manager_command is not None
        self.manager_command = list(
            manager_command
            if manager_command is not None
            else [sys.executable, "-m", "treasurehunt.manager"]
        )
        self._clock = clock
        self.running = False
        self.shutting_down = False
        self.pid: Optional[int] = None
        self._deadline: Optional[float] = None

    def start(self) -> bool:
        """Start the monitor; return whether it was started by this call."""
        if self.shutting_down:
            return False
        if self.running:
            self.out.write("Monitor is already running\n")
            return False
        self.pid = os.getpid()
        self.running = True
        self.out.write(f"Monitor started, PID: {self.pid}\n")
        return True

    def stop(self) -> bool:
        """Ask a running monitor to shut down; return whether a request was made."""
        if not self.running:
            self.out.write("No monitor is running\n")
            return False
        if not self.shutting_down:
            self.shutting_down = True
            self.out.write("Monitor shutting down...\n")
            self._deadline = self._clock() + self.shutdown_delay
        return True

    def poll(self) -> bool:
        """Finish a shutdown whose delay has passed; return whether the monitor runs."""
        if self.shutting_down and self._deadline is not None:
            if self._clock() >= self._deadline:
                self.out.write("Monitor exited with code: 0\n")
                self.running = False
                self.shutting_down = False
                self.pid = None
                self._deadline = None
        return self.running

    def _environment(self) -> Optional[dict]:
        if self._custom_command:
            return None
        env = dict(os.environ)
        package_parent = str(Path(__file__).resolve().parent.parent)
        existing = env.get("PYTHONPATH")
        env["PYTHONPATH"] = (
            package_parent + os.pathsep + existing if existing else package_parent
        )
        return env

    def run_command(self, args: Sequence[str]) -> int:
        """Run a management command, echo its output and return its exit status."""
        command = self.manager_command + _split_command(args)
        try:
            result = subprocess.run(
                command,
                cwd=self.root,
                env=self._environment(),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            self.out.write(f"Failed to run command: {exc.strerror or exc}\n")
            status = 1
        else:
            self.out.write(result.stdout)
            status = result.returncode
        self.out.write(f"Command exited with status {status}\n")
        return status


class Hub:
    """Reads hub commands and dispatches them to the monitor."""

    def __init__(
        self,
        monitor: Optional[Monitor] = None,
        stdin: Optional[TextIO] = None,
        out: Optional[TextIO] = None,
        root=None,
    ) -> None:
        self.out = out if out is not None else sys.stdout
        self.stdin = stdin if stdin is not None else sys.stdin
        self.root = Path(root) if root is not None else Path(".")
        self.monitor = (
            monitor if monitor is not None else Monitor(out=self.out, root=self.root)
        )
        self._shutdown_notice_shown = False

    def _ask(self, prompt: str) -> str:
        self.out.write(prompt)
        self.out.flush()
        return self.stdin.readline().rstrip("\n")

    def _available(self) -> bool:
        if not self.monitor.running:
            self.out.write("Monitor is not running\n")
            return False
        return not self.monitor.shutting_down

    def _treasure_command(self, command: str) -> None:
        if not self._available():
            return
        option = "--list" if command == "list_treasures" else "--view"
        args = [option, self._ask("Give a Hunt ID: ")]
        if command == "view_treasure":
            args.append(self._ask("Give a treasure ID: "))
        self.out.write(
            "Listing treasures...\n" if command == "list_treasures" else "Viewing treasure...\n"
        )
        self.monitor.run_command(args)

    def _list_hunts(self) -> None:
        if not self._available():
            return
        self.out.write("Listing hunts...\n")
        self.monitor.run_command(["--list_hunts"])

    def _calculate_scores(self) -> None:
        if not self._available():
            return
        try:
            hunts = hunt_directories(self.root)
        except OSError as exc:
            print(
                f"Failed to open current directory: {exc.strerror or exc}",
                file=sys.stderr,
            )
            return
        for hunt in hunts:
            self.out.write("\n=======================\n")
            self.out.write(f"Scores for hunt: {hunt.name}\n")
            self.out.write("-----------------------\n")
            try:
                self.out.write(format_scores(score_hunt(hunt)))
            except OSError as exc:
                print(
                    f"Failed to open treasure file: {exc.strerror or exc}",
                    file=sys.stderr,
                )

    def handle(self, command: str) -> bool:
        """Carry out one command; return False when the hub should exit."""
        command = command.rstrip("\n")
        self.monitor.poll()
        if self.monitor.shutting_down:
            if not self._shutdown_notice_shown:
                self.out.write("Monitor is shutting down, please wait...\n")
                self._shutdown_notice_shown = True
        else:
            self._shutdown_notice_shown = False

        if command == "start_monitor":
            self.monitor.start()
        elif command == "stop_monitor":
            self.monitor.stop()
        elif command == "exit":
            if self.monitor.shutting_down:
                return True
            if self.monitor.running:
                self.out.write(
                    "Monitor is still running, you need to stop it before you exit!\n"
                )
                return True
            return False
        elif command in ("list_treasures", "view_treasure"):
            self._treasure_command(command)
        elif command == "list_hunts":
            self._list_hunts()
        elif command == "calculate_score":
            self._calculate_scores()
        else:
            self.out.write(INVALID_COMMAND)
        return True

    def run(self) -> None:
        """Process commands from stdin until exit or end of input."""
        while True:
            line = self.stdin.readline()
            if not line:
                return
            if not self.handle(line):
                return


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the interactive hub on standard input and output."""
    Hub().run()
    return 0


if __name__ == "__main__":
    sys.exit(main())