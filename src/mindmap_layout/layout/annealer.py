"""Simulated-annealing driver for the layout lattice.

The annealer repeatedly proposes swapping two lattice cells, evaluates the
cost change incrementally from the two cells' edges, and accepts or reverts
the swap with the Metropolis rule at the current temperature.

Schedule:

* Work proceeds in batches of ``active_cells * moves_per_cell`` proposals.
* After each batch the relative gain ``(cost - batch_start) / batch_start``
  is checked. A batch that improved the cost by less than
  ``gain_threshold`` bumps a stuck counter; a larger improvement resets it.
* Once the stuck counter reaches ``stuck_limit`` the temperature is
  multiplied by ``cooling_factor``. The run ends when the temperature drops
  to ``min_temperature``.

Dense graphs therefore get proportionally more moves per temperature while
small graphs converge quickly.

Usage::

    annealer = Annealer(layout, AnnealingSchedule(), NumpyRandomSource(42))
    stats = annealer.run()
    print(stats.initial_cost, stats.final_cost)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from ..exceptions import ConfigurationError, OptimizerStateError
from ..progress import ProgressCallback, report_progress
from .cost import compound_cost, total_cost
from .grid import MIN_NODE_WIDTH, Layout
from .random_source import RandomSource, make_random_source

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Tuning constants
# ---------------------------------------------------------------------------

INITIAL_TEMPERATURE = 200.0
"""Starting temperature, in cost units (lattice pitch is 75-200)."""

COOLING_FACTOR = 0.5
"""Geometric cooling applied after each plateau."""

MIN_TEMPERATURE = 0.05
"""The run ends once the temperature is at or below this floor."""

STUCK_LIMIT = 5
"""Consecutive low-improvement batches that trigger cooling."""

GAIN_THRESHOLD = 0.1
"""Relative batch improvement below which a batch counts as stuck."""

MOVES_PER_CELL = 100
"""Proposed moves per active cell in one batch."""


@dataclass(frozen=True)
class AnnealingSchedule:
    """Temperature schedule and plateau detection settings.

    Attributes:
        initial_temperature: Starting temperature.
        cooling_factor: Multiplier applied to the temperature on a plateau.
        min_temperature: Terminal temperature floor.
        stuck_limit: Stuck batches needed to cool.
        gain_threshold: Minimum relative improvement that resets the stuck
            counter.
        moves_per_cell: Batch size multiplier.
    """

    initial_temperature: float = INITIAL_TEMPERATURE
    cooling_factor: float = COOLING_FACTOR
    min_temperature: float = MIN_TEMPERATURE
    stuck_limit: int = STUCK_LIMIT
    gain_threshold: float = GAIN_THRESHOLD
    moves_per_cell: int = MOVES_PER_CELL

    def __post_init__(self) -> None:
        errors = []
        if not self.min_temperature > 0:
            errors.append(f"min_temperature must be positive, got {self.min_temperature}")
        if not self.initial_temperature > self.min_temperature:
            errors.append(
                f"initial_temperature ({self.initial_temperature}) must exceed "
                f"min_temperature ({self.min_temperature})"
            )
        if not 0 < self.cooling_factor < 1:
            errors.append(f"cooling_factor must be in (0, 1), got {self.cooling_factor}")
        if self.stuck_limit < 1:
            errors.append(f"stuck_limit must be at least 1, got {self.stuck_limit}")
        if self.gain_threshold < 0:
            errors.append(f"gain_threshold must not be negative, got {self.gain_threshold}")
        if self.moves_per_cell < 1:
            errors.append(f"moves_per_cell must be at least 1, got {self.moves_per_cell}")
        if errors:
            raise ConfigurationError(
                "Invalid annealing schedule",
                context={"errors": "; ".join(errors)},
            )

    @property
    def levels(self) -> int:
        """Number of temperature levels a complete run goes through."""
        count = 0
        t = self.initial_temperature
        while t > self.min_temperature:
            count += 1
            t *= self.cooling_factor
        return count


@dataclass(frozen=True)
class Change:
    """A pairwise swap of two lattice slots.

    Attributes:
        source_row: Row index of the first slot.
        source_index: Column index of the first slot.
        target_row: Row index of the second slot.
        target_index: Column index of the second slot.
        source_cell: Id of the cell in the first slot before the swap.
        target_cell: Id of the cell in the second slot before the swap.
    """

    source_row: int
    source_index: int
    target_row: int
    target_index: int
    source_cell: int
    target_cell: int


@dataclass
class AnnealingStats:
    """Outcome of one annealing run.

    Attributes:
        initial_cost: Layout cost before the run.
        final_cost: Layout cost after the run.
        levels: Temperature levels completed.
        batches: Batches executed.
        accepted: Moves kept.
        rejected: Moves reverted.
        level_costs: Cost at the end of each completed temperature level.
        final_temperature: Temperature when the run stopped.
        cancelled: True if a progress callback stopped the run early.
    """

    initial_cost: float = 0.0
    final_cost: float = 0.0
    levels: int = 0
    batches: int = 0
    accepted: int = 0
    rejected: int = 0
    level_costs: list[float] = field(default_factory=list)
    final_temperature: float = 0.0
    cancelled: bool = False

    @property
    def gain(self) -> float:
        """Relative cost change over the whole run (negative is better)."""
        if self.initial_cost == 0:
            return 0.0
        return (self.final_cost - self.initial_cost) / self.initial_cost

    @property
    def moves(self) -> int:
        return self.accepted + self.rejected


class Annealer:
    """Runs simulated annealing over a :class:`Layout` in place.

    Args:
        layout: Lattice to optimize. Only slot assignments and cell
            rectangles are changed; nodes and adjacency are left alone.
        schedule: Temperature schedule. Defaults to the standard constants.
        random_source: A :class:`RandomSource`, an integer seed, or None.
    """

    def __init__(
        self,
        layout: Layout,
        schedule: AnnealingSchedule | None = None,
        random_source: RandomSource | int | None = None,
    ) -> None:
        self.layout = layout
        self.schedule = schedule or AnnealingSchedule()
        self.random = make_random_source(random_source)

    # -----------------------------------------------------------------------
    # Move protocol
    # -----------------------------------------------------------------------

    def plan_change(self) -> Change:
        """Pick two distinct lattice slots uniformly at random.

        A row is drawn first and then a slot within it, independently for
        both ends. Empty cells may be picked, so a node can move into open
        space.
        """
        rows = self.layout.rows
        if self.layout.cell_count < 2:
            raise OptimizerStateError(
                "Cannot plan a swap in a lattice with fewer than two cells",
                context={"cells": self.layout.cell_count},
            )
        rand = self.random

        while True:
            source_row = rand.randbelow(len(rows))
            if not rows[source_row].slots:
                continue
            source_index = rand.randbelow(len(rows[source_row].slots))

            target_row = rand.randbelow(len(rows))
            if not rows[target_row].slots:
                continue
            target_index = rand.randbelow(len(rows[target_row].slots))

            source_cell = rows[source_row].slots[source_index]
            target_cell = rows[target_row].slots[target_index]
            if source_cell != target_cell:
                return Change(
                    source_row=source_row,
                    source_index=source_index,
                    target_row=target_row,
                    target_index=target_index,
                    source_cell=source_cell,
                    target_cell=target_cell,
                )

    def do_change(self, change: Change) -> None:
        """Swap the two cells and move their rectangles to the new slots.

        The previous rectangles are stashed so :meth:`undo_change` can
        restore them exactly.
        """
        source_row = self.layout.rows[change.source_row]
        target_row = self.layout.rows[change.target_row]
        source = self.layout.cells[change.source_cell]
        target = self.layout.cells[change.target_cell]

        source_row.slots[change.source_index] = change.target_cell
        target_row.slots[change.target_index] = change.source_cell

        source.push_rect()
        source.rect.x = target_row.x + change.target_index * MIN_NODE_WIDTH
        source.rect.y = target_row.y
        target.push_rect()
        target.rect.x = source_row.x + change.source_index * MIN_NODE_WIDTH
        target.rect.y = source_row.y

    def undo_change(self, change: Change) -> None:
        """Revert a change applied by :meth:`do_change`."""
        self.layout.rows[change.source_row].slots[change.source_index] = change.source_cell
        self.layout.rows[change.target_row].slots[change.target_index] = change.target_cell
        self.layout.cells[change.source_cell].pop_rect()
        self.layout.cells[change.target_cell].pop_rect()

    def try_change(self, cost: float, temperature: float) -> tuple[float, bool]:
        """Propose one move and keep or revert it.

        Only the edges of the two swapped cells change length, so the new
        cost is derived from their compound costs before and after.

        Returns:
            ``(cost, accepted)`` where *cost* is the running cost after the
            decision.
        """
        change = self.plan_change()
        layout = self.layout
        source = layout.cells[change.source_cell]
        target = layout.cells[change.target_cell]

        new_cost = cost
        new_cost -= compound_cost(layout, source)
        new_cost -= compound_cost(layout, target)

        self.do_change(change)

        new_cost += compound_cost(layout, source)
        new_cost += compound_cost(layout, target)

        delta = new_cost - cost
        if delta <= 0 or self.random.random() < math.exp(-delta / temperature):
            return new_cost, True

        self.undo_change(change)
        return cost, False

    # -----------------------------------------------------------------------
    # Schedule
    # -----------------------------------------------------------------------

    def run(self, progress_callback: ProgressCallback | None = None) -> AnnealingStats:
        """Anneal until the temperature reaches the floor.

        Progress is reported after every batch, through *progress_callback*
        or else the current :class:`~mindmap_layout.progress.ProgressContext`.
        A callback returning False stops the run between batches.

        Returns:
            :class:`AnnealingStats` for the run. Layouts with fewer than two
            active cells return immediately with zero work done.
        """
        schedule = self.schedule
        cost = total_cost(self.layout)
        stats = AnnealingStats(initial_cost=cost, final_cost=cost)

        active = len(self.layout.active)
        if active < 2:
            return stats

        logger.info("Initial cost: %s", cost)

        batch_size = active * schedule.moves_per_cell
        total_levels = schedule.levels
        t = schedule.initial_temperature

        while t > schedule.min_temperature:
            stuck = 0
            while stuck < schedule.stuck_limit:
                batch_start = cost
                accepts = 0
                rejects = 0
                for _ in range(batch_size):
                    cost, accepted = self.try_change(cost, t)
                    if accepted:
                        accepts += 1
                    else:
                        rejects += 1

                stats.accepted += accepts
                stats.rejected += rejects
                stats.batches += 1

                # A zero-cost batch cannot improve and counts as stuck
                gain = (cost - batch_start) / batch_start if batch_start > 0 else 0.0
                if gain >= -schedule.gain_threshold:
                    stuck += 1
                else:
                    stuck = 0

                logger.debug(
                    "Cost: %s (%.2f%%) acc: %.3f t: %s",
                    cost,
                    gain * 100,
                    accepts / (rejects + 1),
                    t,
                )

                progress = min(1.0, (stats.levels + stuck / schedule.stuck_limit) / total_levels)
                if not self._report(
                    progress_callback, progress, f"Annealing t={t:.3g} cost={cost:.0f}"
                ):
                    stats.cancelled = True
                    break

            if stats.cancelled:
                logger.info("Annealing cancelled at t=%s after %d batches", t, stats.batches)
                break

            stats.level_costs.append(cost)
            stats.levels += 1
            t *= schedule.cooling_factor

        stats.final_cost = cost
        stats.final_temperature = t
        logger.info("End cost: %s (%.2f%%)", cost, stats.gain * 100)
        return stats

    @staticmethod
    def _report(callback: ProgressCallback | None, progress: float, message: str) -> bool:
        if callback is not None:
            return callback(progress, message, True)
        return report_progress(progress, message, True)
