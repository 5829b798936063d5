"""CollapseTransition: animated Expanded <-> Collapsed state of one collection.

A transition records the subtree's natural extent when it starts, holds it
fixed, and interpolates the visible extent from its current value to the
target (0 when collapsing, the recorded extent when expanding) over the
configured duration. A scheduler timer settles the transition, so the node
always reaches a terminal phase even when re-triggered mid-animation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum, auto

import numpy as np

from json_tree_editor.protocols import Scheduler, TimerHandle

__all__ = ["CollapsePhase", "CollapseTransition"]

logger = logging.getLogger(__name__)


class CollapsePhase(StrEnum):
    EXPANDED = auto()
    COLLAPSED = auto()
    ANIMATING = auto()


class CollapseTransition:
    """Collapse flag plus an optional in-flight animation.

    ``collapsed`` is the logical (target) state and flips as soon as an
    animation starts; ``animating`` stays True until the timer settles it.

    Args:
        collapsed: Initial state; no animation is played for it.
        duration:  Animation length in seconds. Zero or negative applies
            every change immediately.
        scheduler: Clock and timer source.
        on_settled: Called after an animation finishes.
    """

    def __init__(
        self,
        collapsed: bool,
        duration: float,
        scheduler: Scheduler,
        on_settled: Callable[[], None] | None = None,
    ) -> None:
        self.collapsed = collapsed
        self.animating = False
        self.duration = duration
        self._scheduler = scheduler
        self._on_settled = on_settled
        self._start = 0.0
        self._from_extent = 0.0
        self._to_extent = 0.0
        self._timer: TimerHandle | None = None

    @property
    def phase(self) -> CollapsePhase:
        if self.animating:
            return CollapsePhase.ANIMATING
        return CollapsePhase.COLLAPSED if self.collapsed else CollapsePhase.EXPANDED

    @property
    def direction(self) -> str | None:
        """"collapse" or "expand" while animating, else None."""
        if not self.animating:
            return None
        return "collapse" if self.collapsed else "expand"

    def extent(self, natural_extent: float) -> float | None:
        """Visible extent right now; None means unconstrained (fully open)."""
        if self.animating:
            return float(
                np.interp(
                    self._scheduler.now(),
                    [self._start, self._start + self.duration],
                    [self._from_extent, self._to_extent],
                )
            )
        return 0.0 if self.collapsed else None

    def animate(self, collapse: bool, natural_extent: float) -> None:
        """Start moving towards ``collapse``.

        Re-triggering towards the current target is a no-op; re-triggering
        towards the opposite target starts from the extent reached so far.
        """
        if collapse == self.collapsed:
            return
        start_extent = self.extent(natural_extent)
        if start_extent is None:
            start_extent = float(natural_extent)
        self.collapsed = collapse
        self._cancel_timer()

        if self.duration <= 0:
            self.animating = False
            return

        self._start = self._scheduler.now()
        self._from_extent = start_extent
        self._to_extent = 0.0 if collapse else float(natural_extent)
        self.animating = True
        self._timer = self._scheduler.call_later(self.duration, self._settle)
        logger.debug(
            "collapse transition %s -> %s over %.3fs",
            self._from_extent,
            self._to_extent,
            self.duration,
        )

    def snap(self, collapse: bool) -> None:
        """Apply ``collapse`` immediately, abandoning any animation."""
        self._cancel_timer()
        self.collapsed = collapse
        self.animating = False

    def cancel(self) -> None:
        """Teardown: settle on the current target without notifying."""
        self._cancel_timer()
        self.animating = False

    def _settle(self) -> None:
        self._timer = None
        self.animating = False
        if self._on_settled is not None:
            self._on_settled()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
