# treasurehunt

Keep treasure hunts on disk, browse them, and total up each player's score.

Every hunt is a directory in the current working directory. Its treasures are
kept in `<hunt>/treasures.dat` as fixed-size binary records (user names are cut
to 29 bytes, clues to 249 bytes). Every action on a hunt is appended to
`<hunt>/logged_hunt.txt`, and adding a treasure creates a symbolic link
`logged_hunt-<hunt>` in the working directory that points at that log.

## Installing

```
pip install .
```

## Managing hunts

```
treasure-manager --add <hunt>          # prompts for the treasure's fields
treasure-manager --list <hunt>         # file size, modification time, every treasure
treasure-manager --view <hunt> <ID>    # show every treasure with that ID
treasure-manager --remove <hunt> <ID>  # drop every treasure with that ID
treasure-manager --delete <hunt>       # remove the treasures, the log, the link and the directory
treasure-manager --list_hunts          # list every hunt in the working directory, by name
```

`--add` asks for the ID, user name, latitude, longitude, value and clue, in that
order, and creates the hunt directory if it does not exist. Numbers are read
from the start of each answer; an answer that does not start with a number
counts as 0.

Each treasure is shown as six lines: ID, user name, latitude and longitude with
two decimals, clue, value. Errors, such as a missing hunt or a treasure that is
not found, are printed on standard error.

## Scores

```
calculate-score <hunt>
```

This prints one line per user, `name: total`, with users in the order they
first appear in the hunt. At most 1000 distinct users are counted.

## The hub

```
treasure-hub
```

The hub reads one command per line from standard input:

- `start_monitor`: start the monitor and print its PID
- `list_hunts`: list every hunt
- `list_treasures`: asks for a hunt ID and lists its treasures
- `view_treasure`: asks for a hunt ID and a treasure ID and shows that treasure
- `calculate_score`: prints the scores of every hunt in the working directory
- `stop_monitor`: stop the monitor
- `exit`: leave the hub. The monitor has to be stopped first.

Any other command prints this list. `list_hunts`, `list_treasures`,
`view_treasure` and `calculate_score` need a running monitor. The listing
commands run `treasure-manager` as a separate process and show its output
followed by its exit status.

Stopping the monitor is not immediate: it finishes about ten seconds after
`stop_monitor`. Until then the hub says once that the monitor is shutting down
and ignores commands that need it, including `exit`. The hub also ends at the
end of its input.

The hub only reads hunts; adding, removing and deleting treasures are done with
`treasure-manager` directly.

## Using it from Python

```python
from pathlib import Path

from treasurehunt.manager import add_treasure, view_treasure
from treasurehunt.records import Treasure, read_treasures
from treasurehunt.score import calculate_scores, format_scores

root = Path(".")
add_treasure("hunt1", Treasure(1, "alice", 45.75, 21.23, "Under the bridge", 10), root)
view_treasure("hunt1", 1, None, root)
print(format_scores(calculate_scores(read_treasures(root / "hunt1" / "treasures.dat"))))
```

The manager functions raise `HuntError` when an operation fails, and
`TreasureNotFound` (a kind of `HuntError`) when no treasure has the requested
ID. `treasurehunt.hub` offers `Hub` and `Monitor` for driving the hub from
code, and `hunt_directories(root)` for finding the hunts under a directory.