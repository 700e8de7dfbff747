# core/engine.py
"""
Itinerary engine: the selection state machine and the pricing rule.

All mutations go through the command methods below. Inputs are normalised
(clamped or toggled), never rejected, so every reachable state is a valid,
priced itinerary. `compute_itinerary()` recomputes from scratch on each call.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional

from core.config import DEFAULT_CATALOG, DEFAULT_PROPERTY
from core.models import (
    MAX_CHAIR_SETS,
    MIN_CHAIR_SETS,
    AddOnCatalog,
    Itinerary,
    LineItem,
    PropertyConfig,
    SelectionState,
    check_day,
)

logger = logging.getLogger(__name__)


def format_usd(amount: int) -> str:
    """Whole-dollar USD, e.g. 1175 -> "$1,175"."""
    return f"${amount:,}"


def _plural(n: int, word: str = "set") -> str:
    return f"{n} {word}{'s' if n != 1 else ''}"


def clamp_chair_sets(n: int) -> int:
    return min(max(int(n), MIN_CHAIR_SETS), MAX_CHAIR_SETS)


class ItineraryEngine:
    def __init__(
        self,
        catalog: AddOnCatalog = DEFAULT_CATALOG,
        prop: PropertyConfig = DEFAULT_PROPERTY,
    ):
        self.catalog = catalog
        self.property = prop
        self._state = SelectionState()

    # ──────────────────────────────────────────────────────────────────────
    # Read side
    # ──────────────────────────────────────────────────────────────────────
    @property
    def state(self) -> SelectionState:
        """A copy of the current selection; mutating it has no effect."""
        return dataclasses.replace(self._state)

    def compute_itinerary(self) -> Itinerary:
        s = self._state
        included = self.property.included_chair_sets
        paid = max(s.chair_set_count - included, 0)

        if included > 0:
            chair_note = (
                f"Home includes {_plural(included)}. "
                f"You’re booking {s.chair_set_count} total → {paid} paid."
            )
        else:
            chair_note = f"You’re booking {_plural(s.chair_set_count)}."

        items = [
            LineItem(
                kind="chair_sets",
                label="Chair sets",
                quantity=s.chair_set_count,
                amount=paid * self.catalog.chair_set,
                note=chair_note,
            ),
            LineItem(
                kind="supply_box",
                label="Beach Better Box",
                quantity=s.supply_box_included,
                amount=self.catalog.supply_box if s.supply_box_included else 0,
                note="Included this week" if s.supply_box_included else "Not selected",
            ),
            LineItem(
                kind="bonfire",
                label="Beach Bonfire",
                quantity=s.bonfire_day,
                amount=self.catalog.bonfire if s.bonfire_day else 0,
                note=f"Scheduled · {s.bonfire_day}" if s.bonfire_day else "Not scheduled",
            ),
            LineItem(
                kind="photo_session",
                label="Family Photography",
                quantity=s.photo_day,
                amount=self.catalog.photo_session if s.photo_day else 0,
                note=f"Scheduled · {s.photo_day}" if s.photo_day else "Not scheduled",
            ),
        ]
        return Itinerary(paid_chair_sets=paid, line_items=items)

    # ──────────────────────────────────────────────────────────────────────
    # Commands
    # ──────────────────────────────────────────────────────────────────────
    def set_chair_set_count(self, n: int) -> None:
        self._state.chair_set_count = clamp_chair_sets(n)
        logger.debug("chair sets -> %d", self._state.chair_set_count)

    def increment_chair_sets(self) -> None:
        self.set_chair_set_count(self._state.chair_set_count + 1)

    def decrement_chair_sets(self) -> None:
        self.set_chair_set_count(self._state.chair_set_count - 1)

    def toggle_supply_box(self) -> None:
        self._state.supply_box_included = not self._state.supply_box_included

    def toggle_bonfire(self, day: Optional[str] = None) -> None:
        """Unschedule if scheduled; otherwise schedule on `day` (or the property default)."""
        if self._state.bonfire_day is not None:
            self._state.bonfire_day = None
        else:
            self._state.bonfire_day = check_day(day or self.property.default_bonfire_day)

    def set_bonfire_day(self, day: str) -> None:
        """Day-chip click: re-clicking the scheduled day clears it."""
        check_day(day)
        self._state.bonfire_day = None if self._state.bonfire_day == day else day

    def toggle_photo_session(self, day: Optional[str] = None) -> None:
        if self._state.photo_day is not None:
            self._state.photo_day = None
        else:
            self._state.photo_day = check_day(day or self.property.default_photo_day)

    def set_photo_day(self, day: str) -> None:
        check_day(day)
        self._state.photo_day = None if self._state.photo_day == day else day

    def reset(self) -> None:
        self._state = SelectionState()
