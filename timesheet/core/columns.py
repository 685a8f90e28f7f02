"""Header-name based column resolution for sheet ranges."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from timesheet.core.errors import SheetSchemaError


def resolve_columns(headers: Sequence[str], required: Iterable[str], *, tab: str = "sheet") -> dict[str, int]:
    """Map each required column name to its zero-based index in ``headers``.

    Matching is exact and the first occurrence of a duplicated header wins.
    Raises ``SheetSchemaError`` naming every required column that is absent.
    """

    positions: dict[str, int] = {}
    missing: list[str] = []
    for name in required:
        if name in positions:
            continue
        for index, header in enumerate(headers):
            if header == name:
                positions[name] = index
                break
        else:
            missing.append(name)
    if missing:
        raise SheetSchemaError(tab, missing)
    return positions


@dataclass(frozen=True)
class ColumnMap:
    """Resolved layout of one sheet tab, built once per request."""

    tab: str
    headers: tuple[str, ...]
    positions: Mapping[str, int]
    # Optional columns the sheet does not have; they read as empty.
    absent: frozenset[str] = frozenset()

    @classmethod
    def from_header(
        cls,
        tab: str,
        headers: Sequence[str],
        required: Iterable[str],
        optional: Iterable[str] = (),
    ) -> "ColumnMap":
        header_row = tuple(str(cell) for cell in headers)
        positions = resolve_columns(header_row, required, tab=tab)
        absent: set[str] = set()
        for name in optional:
            if name in positions:
                continue
            if name in header_row:
                positions[name] = header_row.index(name)
            else:
                absent.add(name)
        return cls(tab=tab, headers=header_row, positions=positions, absent=frozenset(absent))

    @property
    def width(self) -> int:
        return len(self.headers)

    def get(self, row: Sequence[object], name: str) -> str:
        """Cell value for ``name``; cells past the end of a short row read as empty."""

        if name in self.absent:
            return ""
        position = self.positions[name]
        if position >= len(row):
            return ""
        value = row[position]
        return "" if value is None else str(value)

    def cells(self, values: Mapping[str, str]) -> dict[int, str]:
        """Key ``values`` by column position, dropping columns the sheet does not have."""

        return {self.positions[name]: value for name, value in values.items() if name not in self.absent}

    def build_row(self, values: Mapping[str, str], base: Sequence[object] | None = None) -> list[str]:
        """Lay out ``values`` in header order, keeping unrelated cells from ``base``."""

        row = [str(cell) for cell in (base or [])][: self.width]
        row.extend([""] * (self.width - len(row)))
        for name, value in values.items():
            if name in self.absent:
                continue
            row[self.positions[name]] = value
        return row
