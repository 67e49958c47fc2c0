from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence, TypeAlias

from bookletmaker.constants import PAGES_PER_SHEET
from bookletmaker.imposition.errors import InvalidDocument

Face = Literal["front", "back"]


@dataclass(frozen=True)
class NormalizedCount:
    page_count: int
    padded_count: int

    @property
    def sheet_count(self) -> int:
        return self.padded_count // PAGES_PER_SHEET

@dataclass(frozen=True)
class CopySource:
    index: int


@dataclass(frozen=True)
class Blank:
    width: float
    height: float


PlacementEntry: TypeAlias = CopySource | Blank


@dataclass(frozen=True)
class ImposedSide:
    sheet: int
    face: Face
    left: PlacementEntry
    right: PlacementEntry


@dataclass(frozen=True)
class OutputPlan:
    page_count: int
    positions: tuple[int, ...]
    entries: tuple[PlacementEntry, ...]

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def sheet_count(self) -> int:
        return len(self.entries) // PAGES_PER_SHEET

    @property
    def copy_indices(self) -> list[int]:
        return [entry.index for entry in self.entries if isinstance(entry, CopySource)]

    @property
    def blank_count(self) -> int:
        return sum(1 for entry in self.entries if isinstance(entry, Blank))

    def sides(self) -> list[ImposedSide]:
        """Group the plan into printed sides, front then back for each sheet."""
        sides: list[ImposedSide] = []
        for sheet_index in range(self.sheet_count):
            start = sheet_index * PAGES_PER_SHEET
            front_left, front_right, back_left, back_right = self.entries[start : start + PAGES_PER_SHEET]
            sides.append(ImposedSide(sheet=sheet_index + 1, face="front", left=front_left, right=front_right))
            sides.append(ImposedSide(sheet=sheet_index + 1, face="back", left=back_left, right=back_right))
        return sides


def normalize_page_count(page_count: int) -> NormalizedCount:
    if page_count < 1:
        raise InvalidDocument(f"document must have at least one page, got {page_count}")

    remainder = page_count % PAGES_PER_SHEET
    padding = 0 if remainder == 0 else PAGES_PER_SHEET - remainder
    return NormalizedCount(page_count=page_count, padded_count=page_count + padding)


def sheet_order(padded_count: int) -> tuple[int, ...]:
    """Return 1-indexed logical positions for each sheet.

    Every sheet contributes four positions: front left, front right, back
    left, back right. The outermost sheet comes first so a stack printed
    2-up duplex (short-edge flip) and folded in the middle reads 1..n.
    """
    if padded_count < 0 or padded_count % PAGES_PER_SHEET != 0:
        raise ValueError("padded_count must be a non-negative multiple of 4")

    n = padded_count
    positions: list[int] = []
    for sheet in range(1, n // PAGES_PER_SHEET + 1):
        positions.append(n - 2 * (sheet - 1))
        positions.append(2 * sheet - 1)
        positions.append(2 * sheet)
        positions.append(n - 2 * sheet + 1)
    return tuple(positions)


def resolve_placements(
    positions: Sequence[int],
    page_count: int,
    reference_size: tuple[float, float],
) -> tuple[PlacementEntry, ...]:
    width, height = reference_size
    entries: list[PlacementEntry] = []
    for position in positions:
        index = position - 1
        if 0 <= index < page_count:
            entries.append(CopySource(index=index))
        else:
            entries.append(Blank(width=width, height=height))
    return tuple(entries)


def impose_booklet(page_count: int, reference_page_size: tuple[float, float]) -> OutputPlan:
    normalized = normalize_page_count(page_count)
    positions = sheet_order(normalized.padded_count)
    entries = resolve_placements(positions, normalized.page_count, reference_page_size)
    return OutputPlan(page_count=normalized.page_count, positions=positions, entries=entries)
