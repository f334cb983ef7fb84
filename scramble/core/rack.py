"""Pure helpers for manipulating a player's rack.

Functions here have no side effects (they return new lists), so they are
easy to unit test without the controller.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from .tiles import RACK_SIZE, draw
from .types import Tile


def find_tile(rack: Sequence[Tile], tile_id: str) -> Tile | None:
    return next((tile for tile in rack if tile.id == tile_id), None)


def take_from_rack(rack: Sequence[Tile], tile_id: str) -> tuple[Tile, list[Tile]]:
    """Remove one tile by id; the survivors keep their relative order.

    Raises `KeyError` when the tile is not on the rack.
    """
    tile = find_tile(rack, tile_id)
    if tile is None:
        raise KeyError(tile_id)
    return tile, [t for t in rack if t.id != tile_id]


def return_to_rack(rack: Sequence[Tile], tiles: Iterable[Tile]) -> list[Tile]:
    """Append tiles back to the rack, resetting any blank letter assignment."""
    return list(rack) + [tile.cleared() for tile in tiles]


def refill_rack(rack: Sequence[Tile], bag: Sequence[Tile]) -> tuple[list[Tile], list[Tile]]:
    """Draw up to `RACK_SIZE` (capped by what the bag holds).

    Returns `(rack, bag)`.
    """
    drawn, remaining = draw(bag, RACK_SIZE - len(rack))
    return list(rack) + drawn, remaining
