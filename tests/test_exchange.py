from __future__ import annotations

import random

import pytest

from conftest import make_tile, rack_of
from scramble.core.tiles import ExchangeError, exchange


def test_exchange_swaps_same_number() -> None:
    rack = rack_of("AAAAAAA")
    bag = rack_of("ZZZZZZZZZZ", "bag")
    new_rack, new_bag = exchange(rack, ["r0", "r1", "r2"], bag, random.Random(5))
    assert len(new_rack) == 7
    assert [t.letter for t in new_rack].count("Z") == 3
    assert len(new_bag) == 10
    # returned tiles are in the bag, not on the rack
    assert {"r0", "r1", "r2"} <= {t.id for t in new_bag}
    assert not {"r0", "r1", "r2"} & {t.id for t in new_rack}


def test_exchange_never_redraws_own_tiles() -> None:
    rack = rack_of("ABC")
    bag = rack_of("XY", "bag")
    new_rack, _ = exchange(rack, ["r0", "r1"], bag, random.Random(1))
    assert sorted(t.letter for t in new_rack) == ["C", "X", "Y"]


def test_exchange_short_bag_rejected() -> None:
    with pytest.raises(ExchangeError, match="Not enough tiles in the bag"):
        exchange(rack_of("ABC"), ["r0", "r1"], rack_of("X", "bag"))


def test_exchange_requires_selection() -> None:
    with pytest.raises(ExchangeError):
        exchange(rack_of("ABC"), [], rack_of("XYZ", "bag"))


def test_exchange_unknown_tile_rejected() -> None:
    with pytest.raises(ExchangeError):
        exchange(rack_of("ABC"), ["zzz"], rack_of("XYZ", "bag"))


def test_exchanged_blank_goes_back_unassigned() -> None:
    blank = make_tile("?", "b0").with_letter("Q")
    _, new_bag = exchange([blank], ["b0"], rack_of("X", "bag"))
    returned = next(t for t in new_bag if t.id == "b0")
    assert returned.letter == ""
