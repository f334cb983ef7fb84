from __future__ import annotations

import json
import logging
import random
from collections import Counter
from pathlib import Path
from typing import Iterable, Sequence

from .assets import get_tiles_path
from .types import Tile, TileSpec

log = logging.getLogger("scramble.tiles")

RACK_SIZE = 7
BLANK_SYMBOL = "?"


class ExchangeError(ValueError):
    """Exchange request that cannot be honoured (nothing changes)."""


def _coerce_int(value: object) -> int:
    """Convert JSON-loaded numeric values into ints with validation."""

    if value is None or isinstance(value, bool):
        raise TypeError("numeric value missing")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"expected integer, got {value}")
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValueError("empty string cannot be converted to int")
        return int(stripped)
    raise TypeError(f"unsupported numeric value: {value!r}")


def load_tile_distribution(path: str | Path | None = None) -> list[TileSpec]:
    """Read the tile distribution table.

    Rows that cannot be parsed are logged and skipped. An empty result is
    an error: a game cannot start without tiles.
    """
    p = Path(path or get_tiles_path())
    data = json.loads(p.read_text(encoding="utf-8"))
    rows = data.get("tiles", []) if isinstance(data, dict) else data

    specs: list[TileSpec] = []
    for idx, raw in enumerate(rows):
        if not isinstance(raw, dict):
            log.warning("tiles_skip_invalid_row path=%s index=%s", p, idx)
            continue
        is_blank = bool(raw.get("isBlank", raw.get("is_blank", False)))
        letter = "" if is_blank else str(raw.get("letter", "")).strip().upper()
        if not is_blank and len(letter) != 1:
            log.warning("tiles_bad_letter path=%s index=%s letter=%r", p, idx, letter)
            continue
        try:
            points = _coerce_int(raw.get("points"))
            count = _coerce_int(raw.get("count"))
        except (TypeError, ValueError):
            log.warning("tiles_bad_numeric path=%s index=%s", p, idx)
            continue
        if count < 0 or points < 0:
            log.warning("tiles_negative_value path=%s index=%s", p, idx)
            continue
        specs.append(TileSpec(letter=letter, points=points, count=count, is_blank=is_blank))

    if not specs:
        raise ValueError(f"Tile distribution {p} contains no tiles")
    return specs


def total_tile_count(distribution: Iterable[TileSpec]) -> int:
    return sum(spec.count for spec in distribution)


def shuffle_bag(bag: Sequence[Tile], rng: random.Random | None = None) -> list[Tile]:
    """Return a uniformly shuffled copy of `bag`.

    `random.Random.shuffle` is a Fisher-Yates shuffle, so every permutation
    is equally likely.
    """
    shuffled = list(bag)
    (rng or random.Random()).shuffle(shuffled)
    return shuffled


def create_bag(
    distribution: Sequence[TileSpec] | None = None,
    rng: random.Random | None = None,
) -> list[Tile]:
    """Expand the distribution into individual tiles and shuffle them."""
    specs = distribution if distribution is not None else load_tile_distribution()
    bag: list[Tile] = []
    tile_id = 0
    for spec in specs:
        for _ in range(spec.count):
            bag.append(
                Tile(
                    id=f"tile-{tile_id}",
                    letter="" if spec.is_blank else spec.letter,
                    points=spec.points,
                    is_blank=spec.is_blank,
                )
            )
            tile_id += 1
    return shuffle_bag(bag, rng)


def draw(bag: Sequence[Tile], n: int) -> tuple[list[Tile], list[Tile]]:
    """Take the first `n` tiles (or fewer if the bag is short).

    Returns `(drawn, remaining)`; never raises.
    """
    n = max(0, min(n, len(bag)))
    return list(bag[:n]), list(bag[n:])


def exchange(
    rack: Sequence[Tile],
    chosen_ids: Iterable[str],
    bag: Sequence[Tile],
    rng: random.Random | None = None,
) -> tuple[list[Tile], list[Tile]]:
    """Swap the chosen rack tiles for the same number from the bag.

    Replacements are drawn before the returned tiles go back, so a player
    never redraws their own tiles. Returns `(new_rack, new_bag)`.
    """
    chosen = set(chosen_ids)
    if not chosen:
        raise ExchangeError("Select at least one tile to exchange")
    rack_ids = {tile.id for tile in rack}
    unknown = chosen - rack_ids
    if unknown:
        raise ExchangeError(f"Tiles not on the rack: {', '.join(sorted(unknown))}")
    if len(bag) < len(chosen):
        raise ExchangeError("Not enough tiles in the bag")

    to_return = [tile.cleared() for tile in rack if tile.id in chosen]
    kept = [tile for tile in rack if tile.id not in chosen]
    drawn, remaining = draw(bag, len(to_return))
    new_bag = shuffle_bag(remaining + to_return, rng)
    log.debug("exchange count=%s bag_after=%s", len(to_return), len(new_bag))
    return kept + drawn, new_bag


def count_tiles_by_letter(tiles: Iterable[Tile]) -> dict[str, int]:
    """Tally of tiles per letter; blanks are counted under `?`."""
    counts = Counter(BLANK_SYMBOL if tile.is_blank else tile.letter for tile in tiles)
    return dict(sorted(counts.items()))
