"""Managing hunts: adding, listing, viewing and removing treasures."""

from __future__ import annotations

import os
import re
import sys
import time
from pathlib import Path
from typing import Optional, Sequence, TextIO

from .records import (
    RECORD_SIZE,
    TREASURE_FILE,
    Treasure,
    append_treasure,
    read_treasures,
    write_treasures,
)

LOG_FILE = "logged_hunt.txt"
COPY_FILE = "copy.dat"
LINK_PREFIX = "logged_hunt-"

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class HuntError(Exception):
    """A hunt operation failed."""


class TreasureNotFound(HuntError):
    """No treasure with the requested ID exists in the hunt."""


def _root(root) -> Path:
    return Path(root) if root is not None else Path(".")


def _hunt_dir(hunt_id: str, root) -> Path:
    return _root(root) / hunt_id


def _leading_int(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _leading_float(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


def _failure(message: str, exc: OSError) -> str:
    return f"{message}: {exc.strerror or exc}"


def log_hunt(hunt_id: str, message: str, root=None) -> None:
    """Append a line to the hunt's log; failures are reported on stderr."""
    try:
        with open(_hunt_dir(hunt_id, root) / LOG_FILE, "a", encoding="utf-8") as log:
            log.write(f"{message}\n")
    except OSError as exc:
        print(_failure("Error opening file", exc), file=sys.stderr)


def prompt_treasure(stdin: TextIO, stdout: TextIO) -> Treasure:
    """Ask for each field of a treasure and build it from the answers."""

    def ask(prompt: str) -> str:
        stdout.write(prompt)
        stdout.flush()
        return stdin.readline()

    treasure_id = _leading_int(ask("Enter the ID: "))
    username = ask("Enter the User Name: ").split("\n", 1)[0]
    latitude = _leading_float(ask("Enter the latitude: "))
    longitude = _leading_float(ask("Enter the longitude: "))
    value = _leading_int(ask("Enter the value: "))
    clue = ask("Enter the clue: ").split("\n", 1)[0]
    return Treasure(treasure_id, username, latitude, longitude, clue, value)


def add_treasure(hunt_id: str, treasure: Treasure, root=None) -> None:
    """Store a treasure in the hunt, creating the hunt and its log link as needed."""
    hunt = _hunt_dir(hunt_id, root)
    if not hunt.is_dir():
        try:
            hunt.mkdir(mode=0o777)
        except OSError as exc:
            raise HuntError(_failure("Error creating directory", exc)) from exc
    try:
        append_treasure(hunt / TREASURE_FILE, treasure)
    except OSError as exc:
        raise HuntError(_failure("Error writing to file", exc)) from exc
    log_hunt(hunt_id, "Treasure added", root)
    link = _root(root) / f"{LINK_PREFIX}{hunt_id}"
    try:
        os.symlink(f"{hunt_id}/{LOG_FILE}", link)
    except FileExistsError:
        pass
    except OSError as exc:
        print(_failure("Error creating symlink", exc), file=sys.stderr)


def _load_nonempty(path: Path) -> list[Treasure]:
    try:
        treasures = read_treasures(path)
    except OSError as exc:
        raise HuntError(_failure("Error opening file", exc)) from exc
    if not treasures:
        raise HuntError("Error reading file")
    return treasures


def list_hunt(hunt_id: str, out: Optional[TextIO] = None, root=None) -> None:
    """Print the hunt's file details followed by every treasure in it."""
    out = out if out is not None else sys.stdout
    path = _hunt_dir(hunt_id, root) / TREASURE_FILE
    try:
        info = path.stat()
    except OSError as exc:
        raise HuntError(_failure("Error accessing file", exc)) from exc
    modified = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(info.st_mtime))
    out.write("===================\n")
    out.write(f"Hunt Name: {hunt_id}\n")
    out.write("-------------------\n")
    out.write(f"File size: {info.st_size} bytes\n")
    out.write(f"Last modified: {modified}\n")
    out.write("-------------------\n")
    for treasure in _load_nonempty(path):
        out.write(treasure.format())
    log_hunt(hunt_id, "Listed treasures", root)


def view_treasure(
    hunt_id: str, treasure_id: int, out: Optional[TextIO] = None, root=None
) -> None:
    """Print every treasure of the hunt with the given ID."""
    out = out if out is not None else sys.stdout
    path = _hunt_dir(hunt_id, root) / TREASURE_FILE
    if not path.exists():
        raise HuntError("Error accessing file: No such file or directory")
    matches = [t for t in _load_nonempty(path) if t.treasure_id == treasure_id]
    if not matches:
        raise TreasureNotFound("Treasure not found")
    for treasure in matches:
        out.write(treasure.format())
    log_hunt(hunt_id, f"Viewed treasure with ID: {matches[-1].treasure_id}", root)


def remove_treasure(hunt_id: str, treasure_id: int, root=None) -> None:
    """Delete every treasure of the hunt with the given ID."""
    hunt = _hunt_dir(hunt_id, root)
    path = hunt / TREASURE_FILE
    treasures = _load_nonempty(path)
    kept = [t for t in treasures if t.treasure_id != treasure_id]
    if len(kept) == len(treasures):
        raise TreasureNotFound("Treasure not found")
    copy_path = hunt / COPY_FILE
    try:
        write_treasures(copy_path, kept)
    except OSError as exc:
        raise HuntError(_failure("Error opening file", exc)) from exc
    log_hunt(hunt_id, f"Removed treasure with ID: {treasure_id}", root)
    try:
        os.replace(copy_path, path)
    except OSError as exc:
        raise HuntError(_failure("Error renaming the file", exc)) from exc


def remove_hunt(hunt_id: str, root=None) -> None:
    """Delete the hunt's treasures, log, log link and directory."""
    hunt = _hunt_dir(hunt_id, root)
    steps = (
        (hunt / TREASURE_FILE, os.remove, "Error removing the file"),
        (hunt / LOG_FILE, os.remove, "Error removing the file"),
        (_root(root) / f"{LINK_PREFIX}{hunt_id}", os.remove, "Error removing symbolic link"),
        (hunt, os.rmdir, "Error removing directory"),
    )
    for target, action, message in steps:
        try:
            action(target)
        except OSError as exc:
            raise HuntError(_failure(message, exc)) from exc


def list_hunts(out: Optional[TextIO] = None, root=None) -> None:
    """List every hunt directory under root that holds a treasure file."""
    out = out if out is not None else sys.stdout
    base = _root(root)
    for entry in sorted(base.iterdir(), key=lambda p: p.name):
        if entry.is_dir() and (entry / TREASURE_FILE).exists():
            try:
                list_hunt(entry.name, out, root)
            except HuntError as exc:
                print(exc, file=sys.stderr)


def _usage(program: str) -> str:
    return (
        "Usage:\n"
        f"  {program} --add <huntName>\n"
        f"  {program} --list <huntName>\n"
        f"  {program} --view <huntName> <ID>\n"
        f"  {program} --remove <huntName> <ID>\n"
        f"  {program} --delete <huntName>\n"
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one hunt management command given on the command line."""
    args = list(sys.argv[1:] if argv is None else argv)
    program = "treasure_manager"
    if not args:
        sys.stderr.write(_usage(program))
        return 1
    option = args[0]
    if option == "--list_hunts":
        list_hunts()
        return 0
    if option not in {"--add", "--list", "--view", "--remove", "--delete"}:
        print("Invalid option", file=sys.stderr)
        return 1
    if len(args) < 2:
        sys.stderr.write(_usage(program))
        return 1
    hunt_id = args[1]
    if option in {"--view", "--remove"} and len(args) < 3:
        print("You need to enter a specific ID", file=sys.stderr)
        return 1
    try:
        if option == "--add":
            add_treasure(hunt_id, prompt_treasure(sys.stdin, sys.stdout))
        elif option == "--list":
            list_hunt(hunt_id)
        elif option == "--view":
            view_treasure(hunt_id, _leading_int(args[2]))
        elif option == "--remove":
            remove_treasure(hunt_id, _leading_int(args[2]))
        else:
            remove_hunt(hunt_id)
    except (HuntError, ValueError) as exc:
        print(exc, file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())