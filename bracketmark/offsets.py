from __future__ import annotations

import bisect
from dataclasses import dataclass, field

from . import t


@dataclass
class Offsets:
    """
    Cumulative length deltas between a source text and its rendered output.

    Each entry maps a source position to the total number of characters
    the output gained (or lost, if negative) at or before that position.
    Looking up an index returns how far to shift a source index
    to find the corresponding output index.

    Example:
        source  "a<b"
        output  "a&lt;b"
        entries {1: 3}
        computeOffsetFromIndex(0) == 0, computeOffsetFromIndex(1) == 3
    """

    _positions: list[int] = field(default_factory=list)
    _totals: list[int] = field(default_factory=list)

    def add(self, position: int, delta: int) -> None:
        i = bisect.bisect_left(self._positions, position)
        if i < len(self._positions) and self._positions[i] == position:
            self._totals[i] += delta
        else:
            previous = self._totals[i - 1] if i > 0 else 0
            self._positions.insert(i, position)
            self._totals.insert(i, previous + delta)
        # Edits normally arrive in source order, so this is usually empty.
        for j in range(i + 1, len(self._totals)):
            self._totals[j] += delta

    def computeOffsetFromIndex(self, index: int) -> int:
        i = bisect.bisect_right(self._positions, index)
        if i == 0:
            return 0
        return self._totals[i - 1]

    def sourceToOutput(self, index: int) -> int:
        return index + self.computeOffsetFromIndex(index)

    def __len__(self) -> int:
        return len(self._positions)

    def __bool__(self) -> bool:
        return bool(self._positions)

    def __iter__(self) -> t.Iterator[tuple[int, int]]:
        return iter(zip(self._positions, self._totals))

    def __str__(self) -> str:
        return "Offsets{" + ", ".join(f"{pos}:{total}" for pos, total in self) + "}"
