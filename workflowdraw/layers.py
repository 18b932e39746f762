"""Depth allocation for diagram entities."""

from __future__ import annotations

import logging

from .constants import DEPTH_FLOOR, DEPTH_MAX

logger = logging.getLogger(__name__)


class LayerAllocator:
    """Hands out stacking depths from a decreasing counter.

    Every new entity and every entity released from the reserved top depth
    takes the next value, so the most recent one stacks above the rest.
    The counter stops at ``floor``; later allocations share that depth and
    fall back to insertion order for ties.
    """

    def __init__(self, seed: int = DEPTH_MAX, floor: int = DEPTH_FLOOR) -> None:
        if seed < floor:
            raise ValueError(f"Depth seed {seed} is below the floor {floor}")
        self._seed = seed
        self._floor = floor
        self._next = seed

    @property
    def current(self) -> int:
        """Value the next call to :meth:`next_depth` will return."""
        return self._next

    def next_depth(self) -> int:
        depth = self._next
        if self._next > self._floor:
            self._next -= 1
        else:
            logger.debug("Depth counter exhausted, reusing %d", depth)
        return depth

    def reset(self, seed: int | None = None) -> None:
        if seed is not None:
            if seed < self._floor:
                raise ValueError(f"Depth seed {seed} is below the floor {self._floor}")
            self._seed = seed
        self._next = self._seed
