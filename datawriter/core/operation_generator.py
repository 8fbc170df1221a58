"""Weighted random choice between INSERT, UPDATE and DELETE."""

from __future__ import annotations

import random
from typing import Optional

from datawriter.models import OperationKind, ProbabilityRange


class OperationGenerator:
    """Maps a uniform draw in [0, 1) onto cumulative operation ranges.

    The ranges are computed once: insert covers [0, insert), update follows at
    [insert, insert + update), delete at [insert + update, sum). A draw at or
    beyond the sum of the weights maps to no operation.
    """

    def __init__(
        self,
        insert_probability: float,
        update_probability: float,
        delete_probability: float,
    ) -> None:
        for name, weight in (
            ("insert_probability", insert_probability),
            ("update_probability", update_probability),
            ("delete_probability", delete_probability),
        ):
            if weight < 0:
                raise ValueError(f"{name} must be >= 0, got {weight}")

        insert_high = float(insert_probability)
        update_high = insert_high + float(update_probability)
        delete_high = update_high + float(delete_probability)
        self._ranges: tuple[tuple[OperationKind, ProbabilityRange], ...] = (
            (OperationKind.INSERT, ProbabilityRange(0.0, insert_high)),
            (OperationKind.UPDATE, ProbabilityRange(insert_high, update_high)),
            (OperationKind.DELETE, ProbabilityRange(update_high, delete_high)),
        )

    @classmethod
    def from_config(cls, config) -> "OperationGenerator":
        return cls(
            config.insert_probability,
            config.update_probability,
            config.delete_probability,
        )

    @property
    def ranges(self) -> dict[OperationKind, ProbabilityRange]:
        return dict(self._ranges)

    def pick(self, draw: float) -> Optional[OperationKind]:
        """Return the operation whose range contains ``draw``, if any."""
        for operation, bounds in self._ranges:
            if bounds.contains(draw):
                return operation
        return None

    def next(self, rng: random.Random | None = None) -> Optional[OperationKind]:
        draw = (rng or random).random()
        return self.pick(draw)
