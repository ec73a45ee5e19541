from __future__ import annotations

from typing import Optional


class ScoreAccumulator:
    """
    Running compliance score with a bounded read-out.

    Deductions and credits are applied to a raw total; ``value`` clamps the
    total into ``[floor, ceiling]`` so callers never see an out-of-range score.
    """

    def __init__(self, start: int, floor: int = 0, ceiling: int = 100) -> None:
        if floor > ceiling:
            raise ValueError(f"floor {floor} is above ceiling {ceiling}")
        self.start = start
        self.floor = floor
        self.ceiling = ceiling
        self._raw = start

    @property
    def raw(self) -> int:
        return self._raw

    @property
    def value(self) -> int:
        return max(self.floor, min(self.ceiling, self._raw))

    def deduct(self, points: int) -> None:
        self._raw -= points

    def credit(self, points: int, cap: Optional[int] = None) -> None:
        total = self._raw + points
        if cap is not None:
            total = min(cap, total)
        self._raw = total
