import io

import pytest

from treasurehunt.hub import INVALID_COMMAND, Hub, Monitor, hunt_directories
from treasurehunt.records import Treasure, append_treasure


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def make_hunt(root, name, treasures):
    hunt = root / name
    hunt.mkdir()
    for treasure in treasures:
        append_treasure(hunt / "treasures.dat", treasure)
    return hunt


def make_hub(tmp_path, stdin_text="", delay=10.0, clock=None):
    out = io.StringIO()
    monitor = Monitor(
        out=out, root=tmp_path, shutdown_delay=delay, clock=clock or FakeClock()
    )
    hub = Hub(monitor=monitor, stdin=io.StringIO(stdin_text), out=out, root=tmp_path)
    return hub, monitor, out


def test_hunt_directories_only_with_treasure_file(tmp_path):
    make_hunt(tmp_path, "b", [Treasure(1, "x", 0.0, 0.0, "c", 1)])
    make_hunt(tmp_path, "a", [Treasure(1, "x", 0.0, 0.0, "c", 1)])
    (tmp_path / "empty").mkdir()
    (tmp_path / "odd").mkdir()
    (tmp_path / "odd" / "treasures.dat").mkdir()
    (tmp_path / "file.txt").write_text("x")
    assert [p.name for p in hunt_directories(tmp_path)] == ["a", "b"]


def test_monitor_start_twice(tmp_path):
    out = io.StringIO()
    monitor = Monitor(out=out, root=tmp_path)
    assert monitor.start() is True
    assert monitor.running
    assert out.getvalue().startswith("Monitor started, PID: ")
    assert monitor.start() is False
    assert out.getvalue().endswith("Monitor is already running\n")


def test_stop_without_monitor(tmp_path):
    out = io.StringIO()
    monitor = Monitor(out=out, root=tmp_path)
    assert monitor.stop() is False
    assert out.getvalue() == "No monitor is running\n"


def test_shutdown_completes_after_delay(tmp_path):
    clock = FakeClock()
    out = io.StringIO()
    monitor = Monitor(out=out, root=tmp_path, shutdown_delay=5.0, clock=clock)
    monitor.start()
    assert monitor.stop() is True
    assert "Monitor shutting down...\n" in out.getvalue()
    assert monitor.poll() is True
    assert monitor.shutting_down
    clock.now = 5.0
    assert monitor.poll() is False
    assert not monitor.shutting_down
    assert out.getvalue().endswith("Monitor exited with code: 0\n")


def test_start_ignored_while_shutting_down(tmp_path):
    hub, monitor, out = make_hub(tmp_path)
    hub.handle("start_monitor")
    hub.handle("stop_monitor")
    before = out.getvalue()
    assert monitor.start() is False
    assert out.getvalue() == before


def test_invalid_command(tmp_path):
    hub, _, out = make_hub(tmp_path)
    assert hub.handle("dance") is True
    assert out.getvalue() == INVALID_COMMAND


def test_exit_requires_stopped_monitor(tmp_path):
    hub, _, out = make_hub(tmp_path)
    hub.handle("start_monitor")
    assert hub.handle("exit") is True
    assert out.getvalue().endswith(
        "Monitor is still running, you need to stop it before you exit!\n"
    )


def test_exit_without_monitor(tmp_path):
    hub, _, _ = make_hub(tmp_path)
    assert hub.handle("exit\n") is False


@pytest.mark.parametrize(
    "command", ["list_hunts", "list_treasures", "view_treasure", "calculate_score"]
)
def test_commands_need_monitor(tmp_path, command):
    hub, _, out = make_hub(tmp_path)
    hub.handle(command)
    assert out.getvalue() == "Monitor is not running\n"


def test_shutdown_notice_printed_once(tmp_path):
    hub, _, out = make_hub(tmp_path)
    hub.handle("start_monitor")
    hub.handle("stop_monitor")
    hub.handle("list_hunts")
    hub.handle("exit")
    assert out.getvalue().count("Monitor is shutting down, please wait...\n") == 1


def test_exit_after_shutdown_finishes(tmp_path):
    clock = FakeClock()
    hub, monitor, out = make_hub(tmp_path, delay=1.0, clock=clock)
    hub.handle("start_monitor")
    hub.handle("stop_monitor")
    assert hub.handle("exit") is True
    clock.now = 2.0
    assert hub.handle("exit") is False
    assert "Monitor exited with code: 0\n" in out.getvalue()
    assert not monitor.running


def test_calculate_score(tmp_path):
    make_hunt(
        tmp_path,
        "h1",
        [
            Treasure(1, "alice", 1.0, 2.0, "tree", 10),
            Treasure(2, "bob", 1.0, 2.0, "rock", 7),
            Treasure(3, "alice", 1.0, 2.0, "lake", 5),
        ],
    )
    hub, _, out = make_hub(tmp_path)
    hub.handle("start_monitor")
    hub.handle("calculate_score")
    text = out.getvalue()
    assert "Scores for hunt: h1\n-----------------------\nalice: 15\nbob: 7\n" in text


def test_list_treasures_runs_manager(tmp_path):
    make_hunt(tmp_path, "h1", [Treasure(4, "carol", 1.5, 2.5, "under the bridge", 3)])
    hub, _, out = make_hub(tmp_path, stdin_text="h1\n")
    hub.handle("start_monitor")
    hub.handle("list_treasures")
    text = out.getvalue()
    assert "Give a Hunt ID: " in text
    assert "Listing treasures...\n" in text
    assert "Hunt Name: h1\n" in text
    assert "under the bridge\n" in text
    assert "Command exited with status 0\n" in text


def test_view_treasure_runs_manager(tmp_path):
    make_hunt(
        tmp_path,
        "h1",
        [
            Treasure(4, "carol", 1.5, 2.5, "under the bridge", 3),
            Treasure(5, "dave", 1.5, 2.5, "in the attic", 9),
        ],
    )
    hub, _, out = make_hub(tmp_path, stdin_text="h1\n5\n")
    hub.handle("start_monitor")
    hub.handle("view_treasure")
    text = out.getvalue()
    assert "in the attic\n" in text
    assert "under the bridge" not in text


def test_run_command_reports_failure_status(tmp_path):
    out = io.StringIO()
    monitor = Monitor(out=out, root=tmp_path)
    monitor.start()
    status = monitor.run_command(["--bogus"])
    assert status == 1
    assert "Invalid option\n" in out.getvalue()
    assert out.getvalue().endswith("Command exited with status 1\n")


def test_run_stops_on_exit(tmp_path):
    hub, _, out = make_hub(tmp_path, stdin_text="nonsense\nexit\nnonsense\n")
    hub.run()
    assert out.getvalue() == INVALID_COMMAND