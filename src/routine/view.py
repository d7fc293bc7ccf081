"""Presentation-agnostic view model derived from routine snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Sequence

from .constants import PHASE_HOLD, PHASE_IDLE, PREPARING_PHASES
from .definitions import StretchDefinition
from .service import RoutineSnapshot

ItemStatus = Literal["pending", "current", "completed"]

COMPLETE_TITLE = "Routine Complete!"
IDLE_TITLE = "Ready"
PREPARE_TEXT = "Get ready..."


@dataclass(frozen=True)
class RoutineItemView:
    """One row of the routine list."""
    name: str
    duration_label: str
    status: ItemStatus


@dataclass(frozen=True)
class RoutineView:
    """Display strings and progress for the current routine state."""
    title: str
    phase_text: str
    timer_text: str
    remaining_text: str
    description: str
    progress_percent: float
    items: tuple[RoutineItemView, ...]

    def as_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "phase_text": self.phase_text,
            "timer_text": self.timer_text,
            "remaining_text": self.remaining_text,
            "description": self.description,
            "progress_percent": self.progress_percent,
            "items": [
                {
                    "name": item.name,
                    "duration_label": item.duration_label,
                    "status": item.status,
                }
                for item in self.items
            ],
        }


def format_clock(seconds: int) -> str:
    """Format a duration in seconds as `M:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{remainder:02d}"


def duration_label(stretch: StretchDefinition) -> str:
    if stretch.hold_count > 1:
        return f"{stretch.duration_seconds}s × {stretch.hold_count}"
    return f"{stretch.duration_seconds}s"


def phase_text(snapshot: RoutineSnapshot) -> str:
    if snapshot.phase in PREPARING_PHASES:
        return PREPARE_TEXT
    if snapshot.phase != PHASE_HOLD:
        return ""
    if not snapshot.side:
        return "Hold"
    repetition = (
        f" ({snapshot.repetition + 1}/{snapshot.repetitions})"
        if snapshot.repetitions > 1
        else ""
    )
    return f"Hold - {snapshot.side}{repetition}"


def build_view(
    snapshot: RoutineSnapshot,
    routine: Sequence[StretchDefinition],
) -> RoutineView:
    """Map a runner snapshot to display text without touching any UI toolkit."""
    items = tuple(
        RoutineItemView(
            name=stretch.name,
            duration_label=duration_label(stretch),
            status=_item_status(index, snapshot),
        )
        for index, stretch in enumerate(routine)
    )

    stretch = snapshot.stretch
    if snapshot.completed or stretch is None or snapshot.phase == PHASE_IDLE:
        return RoutineView(
            title=COMPLETE_TITLE if snapshot.completed else IDLE_TITLE,
            phase_text="",
            timer_text="--",
            remaining_text="",
            description="",
            progress_percent=0.0,
            items=items,
        )

    return RoutineView(
        title=stretch.name,
        phase_text=phase_text(snapshot),
        timer_text=str(snapshot.time_remaining),
        remaining_text=f"{format_clock(snapshot.total_time_remaining)} remaining",
        description=stretch.description,
        progress_percent=round(snapshot.elapsed_fraction * 100.0, 1),
        items=items,
    )


def _item_status(index: int, snapshot: RoutineSnapshot) -> ItemStatus:
    if snapshot.completed or index < snapshot.stretch_index:
        return "completed"
    if index == snapshot.stretch_index and snapshot.phase != PHASE_IDLE:
        return "current"
    return "pending"
