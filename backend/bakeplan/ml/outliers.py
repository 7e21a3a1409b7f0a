"""
IQR outlier filter applied to the raw daily sales series before any
statistics are computed.
"""
from typing import List, Sequence, Tuple

import numpy as np

from bakeplan.ml.contracts import FilterResult

MIN_POINTS_FOR_IQR = 4


class IQROutlierFilter:
    """
    Drops observations outside [Q1 - m*IQR, Q3 + m*IQR].

    The pass is repeated on the survivors until nothing more is dropped, so
    filtering an already-filtered series is a no-op. The kept set never
    shrinks below `min_points`: dropped points nearest the bounds are put
    back until the floor is met.
    """

    def __init__(self, multiplier: float = 1.5, min_points: int = 3):
        if multiplier < 0:
            raise ValueError("multiplier must be non-negative")
        if min_points < 1:
            raise ValueError("min_points must be at least 1")
        self._multiplier = multiplier
        self._min_points = min_points

    def bounds(self, series: Sequence[int]) -> Tuple[float, float]:
        q1, q3 = np.percentile(np.asarray(series, dtype=float), [25, 75])
        iqr = q3 - q1
        return float(q1 - self._multiplier * iqr), float(q3 + self._multiplier * iqr)

    def filter(self, series: Sequence[int]) -> FilterResult:
        values = [int(v) for v in series]
        if len(values) < MIN_POINTS_FOR_IQR:
            return FilterResult(kept=tuple(values), removed_count=0, kept_indices=tuple(range(len(values))))

        # (original position, value) so survivors keep input order
        kept: List[Tuple[int, int]] = list(enumerate(values))
        while len(kept) >= MIN_POINTS_FOR_IQR:
            lower, upper = self.bounds([v for _, v in kept])
            inside = [(i, v) for i, v in kept if lower <= v <= upper]
            if len(inside) == len(kept):
                break
            if len(inside) < self._min_points:
                inside = self._restore_to_floor(kept, inside, lower, upper)
                kept = inside
                break
            kept = inside

        kept.sort(key=lambda item: item[0])
        return FilterResult(
            kept=tuple(v for _, v in kept),
            removed_count=len(values) - len(kept),
            kept_indices=tuple(i for i, _ in kept),
        )

    def _restore_to_floor(
        self,
        candidates: List[Tuple[int, int]],
        inside: List[Tuple[int, int]],
        lower: float,
        upper: float,
    ) -> List[Tuple[int, int]]:
        inside_idx = {i for i, _ in inside}
        dropped = [(i, v) for i, v in candidates if i not in inside_idx]
        dropped.sort(key=lambda item: (max(lower - item[1], item[1] - upper), item[0]))
        needed = self._min_points - len(inside)
        return inside + dropped[:needed]
