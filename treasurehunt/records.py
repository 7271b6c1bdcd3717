"""Fixed-size binary treasure records as stored in a hunt's treasures.dat."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Iterable, Union

MAX_USERNAME = 30
MAX_CLUE = 250

# id, username, padding, latitude, longitude, clue, padding, value
_LAYOUT = struct.Struct(f"<i{MAX_USERNAME}s2xff{MAX_CLUE}s2xi")
RECORD_SIZE = _LAYOUT.size

TREASURE_FILE = "treasures.dat"

StrPath = Union[str, "PathLike[str]"]


def _encode_text(text: str, capacity: int) -> bytes:
    # Leave room for the terminating NUL byte.
    return text.encode("utf-8")[: capacity - 1]


def _decode_text(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


@dataclass
class Treasure:
    """One treasure entry of a hunt."""

    treasure_id: int
    username: str
    latitude: float
    longitude: float
    clue: str
    value: int

    def to_bytes(self) -> bytes:
        """Pack the treasure into its fixed-size binary record."""
        try:
            return _LAYOUT.pack(
                self.treasure_id,
                _encode_text(self.username, MAX_USERNAME),
                self.latitude,
                self.longitude,
                _encode_text(self.clue, MAX_CLUE),
                self.value,
            )
        except struct.error as exc:
            raise ValueError(f"treasure cannot be stored: {exc}") from exc

    @classmethod
    def from_bytes(cls, data: bytes) -> "Treasure":
        """Unpack a treasure from exactly one binary record."""
        if len(data) != RECORD_SIZE:
            raise ValueError(
                f"a treasure record is {RECORD_SIZE} bytes, got {len(data)}"
            )
        treasure_id, username, latitude, longitude, clue, value = _LAYOUT.unpack(data)
        return cls(
            treasure_id,
            _decode_text(username),
            latitude,
            longitude,
            _decode_text(clue),
            value,
        )

    def format(self) -> str:
        """Render the treasure as the multi-line listing text."""
        return (
            f"{self.treasure_id}\n{self.username}\n{self.latitude:.2f}\n"
            f"{self.longitude:.2f}\n{self.clue}\n{self.value}\n"
        )


def read_treasures(path: StrPath) -> list[Treasure]:
    """Read every complete record from a treasure file; a partial tail is ignored."""
    data = Path(path).read_bytes()
    whole = len(data) - len(data) % RECORD_SIZE
    return [
        Treasure.from_bytes(data[start : start + RECORD_SIZE])
        for start in range(0, whole, RECORD_SIZE)
    ]


def append_treasure(path: StrPath, treasure: Treasure) -> None:
    """Append one record to a treasure file, creating it if needed."""
    record = treasure.to_bytes()
    with open(path, "ab") as handle:
        handle.write(record)


def write_treasures(path: StrPath, treasures: Iterable[Treasure]) -> None:
    """Replace the contents of a treasure file with the given records."""
    payload = b"".join(treasure.to_bytes() for treasure in treasures)
    with open(path, "wb") as handle:
        handle.write(payload)