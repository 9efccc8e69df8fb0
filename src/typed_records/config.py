"""Configuration for RecordStore."""

from __future__ import annotations

from dataclasses import dataclass

from typed_records.types import ID_LENGTHS


@dataclass(frozen=True)
class StoreConfig:
    """Settings for identifier synthesis.

    Synthesized identifiers are ``prefix + str(id_offset + n)`` zero-padded so
    the whole identifier is ``id_length`` characters long.
    """

    id_length: int = 15
    id_offset: int = 1_000_000

    def __post_init__(self) -> None:
        if self.id_length not in ID_LENGTHS:
            raise ValueError(f"id_length must be one of {ID_LENGTHS}, got {self.id_length}")
        if self.id_offset < 0:
            raise ValueError(f"id_offset must not be negative, got {self.id_offset}")
        # Room for a 3-character prefix and at least the first synthesized number
        if len(str(self.id_offset + 1)) > self.id_length - 3:
            raise ValueError(f"id_offset {self.id_offset} does not fit in a {self.id_length}-character id")
