"""Per-user score totals for a hunt."""

from __future__ import annotations

import sys
from os import PathLike
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence, Union

from .records import TREASURE_FILE, Treasure, read_treasures

MAX_USERS = 1000


def calculate_scores(treasures: Iterable[Treasure]) -> dict[str, int]:
    """Sum treasure values per user, in order of first appearance.

    Counting stops at the first new user once MAX_USERS users are known.
    """
    scores: dict[str, int] = {}
    for treasure in treasures:
        name = treasure.username
        if name in scores:
            scores[name] += treasure.value
        elif len(scores) >= MAX_USERS:
            break
        else:
            scores[name] = treasure.value
    return scores


def score_hunt(hunt_dir: Union[str, "PathLike[str]"]) -> dict[str, int]:
    """Compute the scores of the hunt stored in the given directory."""
    return calculate_scores(read_treasures(Path(hunt_dir) / TREASURE_FILE))


def format_scores(scores: Mapping[str, int]) -> str:
    """Render scores as one 'name: score' line per user."""
    return "".join(f"{name}: {score}\n" for name, score in scores.items())


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print the scores of the hunt named on the command line."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        sys.stderr.write("Usage: calculate_score <HUNT_ID>\n")
        return 1
    try:
        scores = score_hunt(args[0])
    except OSError as exc:
        print(f"Failed to open treasure file: {exc.strerror or exc}", file=sys.stderr)
        return 1
    sys.stdout.write(format_scores(scores))
    return 0


if __name__ == "__main__":
    sys.exit(main())