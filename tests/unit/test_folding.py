from __future__ import annotations

import pytest

from bookletmaker.imposition.core import CopySource, ImposedSide, impose_booklet

pytestmark = pytest.mark.unit


def _fold_reading_order(sides: list[ImposedSide]) -> list[int]:
    """Read a stack of 2-up duplex sheets (short-edge flip) folded in the middle.

    The first sheet is the outermost. Opening the booklet walks the right
    half of each front and the left half of each back from the outside in,
    then the right half of each back and the left half of each front from
    the inside out.
    """
    fronts = [side for side in sides if side.face == "front"]
    backs = [side for side in sides if side.face == "back"]

    first_half = []
    for front, back in zip(fronts, backs):
        first_half.extend([front.right, back.left])

    second_half = []
    for front, back in reversed(list(zip(fronts, backs))):
        second_half.extend([back.right, front.left])

    order = []
    for entry in first_half + second_half:
        assert isinstance(entry, CopySource)
        order.append(entry.index + 1)
    return order


@pytest.mark.parametrize("page_count", [4, 8, 12, 16, 32, 64])
def test_folded_stack_reads_in_ascending_order(page_count: int) -> None:
    plan = impose_booklet(page_count, (420.0, 595.0))
    assert _fold_reading_order(plan.sides()) == list(range(1, page_count + 1))
