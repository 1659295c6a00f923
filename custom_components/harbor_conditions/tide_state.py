"""Tidal phase inference from high/low tide predictions."""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Any, Iterable

from .const import DEFAULT_SLACK_WINDOW

_LOGGER = logging.getLogger(__name__)


class TideKind(str, Enum):
    """Kind of a tide extreme."""

    HIGH = "High"
    LOW = "Low"

    @classmethod
    def from_code(cls, code: Any) -> TideKind | None:
        """Map a NOAA type code to a kind.

        NOAA reports "H"/"L" and, for mixed tides, "HH"/"LH" (higher/lower high)
        and "LL"/"HL" (lower/higher low). Anything else is unresolvable.
        """
        if not isinstance(code, str):
            return None
        code = code.strip().upper()
        if code in ("H", "HH", "LH", "HIGH"):
            return cls.HIGH
        if code in ("L", "LL", "HL", "LOW"):
            return cls.LOW
        return None


class TidePhase(str, Enum):
    """Classified tidal state at an instant."""

    FLOODING = "flooding"
    EBBING = "ebbing"
    SLACK_APPROACHING_HIGH = "slack_approaching_high"
    SLACK_APPROACHING_LOW = "slack_approaching_low"
    SLACK_AFTER_HIGH = "slack_after_high"
    SLACK_AFTER_LOW = "slack_after_low"
    APPROACHING_HIGH = "approaching_high"
    APPROACHING_LOW = "approaching_low"
    AFTER_HIGH = "after_high"
    AFTER_LOW = "after_low"
    INDETERMINATE = "indeterminate"


_SLACK_APPROACHING = {
    TideKind.HIGH: TidePhase.SLACK_APPROACHING_HIGH,
    TideKind.LOW: TidePhase.SLACK_APPROACHING_LOW,
}
_SLACK_AFTER = {
    TideKind.HIGH: TidePhase.SLACK_AFTER_HIGH,
    TideKind.LOW: TidePhase.SLACK_AFTER_LOW,
}
_APPROACHING = {
    TideKind.HIGH: TidePhase.APPROACHING_HIGH,
    TideKind.LOW: TidePhase.APPROACHING_LOW,
}
_AFTER = {
    TideKind.HIGH: TidePhase.AFTER_HIGH,
    TideKind.LOW: TidePhase.AFTER_LOW,
}

TIDE_STATUS_TEXT: dict[TidePhase, str] = {
    TidePhase.FLOODING: "Flooding (Rising)",
    TidePhase.EBBING: "Ebbing (Falling)",
    TidePhase.SLACK_APPROACHING_HIGH: "Slack, turning towards High",
    TidePhase.SLACK_APPROACHING_LOW: "Slack, turning towards Low",
    TidePhase.SLACK_AFTER_HIGH: "Slack, just past High",
    TidePhase.SLACK_AFTER_LOW: "Slack, just past Low",
    TidePhase.APPROACHING_HIGH: "Rising towards High",
    TidePhase.APPROACHING_LOW: "Falling towards Low",
    TidePhase.AFTER_HIGH: "Past High (no later data)",
    TidePhase.AFTER_LOW: "Past Low (no later data)",
    TidePhase.INDETERMINATE: "Tide data incomplete",
}

TIDE_SUMMARY_TEXT: dict[TidePhase, str] = {
    TidePhase.FLOODING: "Flooding",
    TidePhase.EBBING: "Ebbing",
    TidePhase.SLACK_APPROACHING_HIGH: "Slack near High",
    TidePhase.SLACK_APPROACHING_LOW: "Slack near Low",
    TidePhase.SLACK_AFTER_HIGH: "Slack near High",
    TidePhase.SLACK_AFTER_LOW: "Slack near Low",
    TidePhase.APPROACHING_HIGH: "Flooding",
    TidePhase.APPROACHING_LOW: "Ebbing",
    TidePhase.AFTER_HIGH: "After High",
    TidePhase.AFTER_LOW: "After Low",
    TidePhase.INDETERMINATE: "Tide data incomplete",
}


@dataclass(frozen=True)
class TideEvent:
    """A predicted high or low tide."""

    timestamp: datetime
    kind: TideKind | None
    height: float


@dataclass(frozen=True)
class ResolvedTideState:
    """Tidal phase at an instant plus the events bracketing it."""

    previous_event: TideEvent | None = None
    next_event: TideEvent | None = None
    following_event: TideEvent | None = None
    phase: TidePhase = TidePhase.INDETERMINATE

    @property
    def is_slack(self) -> bool:
        return self.phase in _SLACK_APPROACHING.values() or self.phase in _SLACK_AFTER.values()


def tide_status_text(phase: TidePhase) -> str:
    """Return the long status line for a phase."""
    return TIDE_STATUS_TEXT[phase]


def tide_summary_text(phase: TidePhase) -> str:
    """Return the one-word summary for a phase."""
    return TIDE_SUMMARY_TEXT[phase]


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _normalized(event: TideEvent) -> TideEvent:
    """Return the event with its kind coerced to a TideKind or None."""
    if event.kind is None or isinstance(event.kind, TideKind):
        return event
    return replace(event, kind=TideKind.from_code(event.kind))


def _following_event(future: list[TideEvent]) -> TideEvent | None:
    """Pick the event after the next one, skipping same-kind duplicates."""
    if len(future) < 2:
        return None
    next_event = future[0]
    for event in future[1:]:
        if event.kind != next_event.kind:
            return event
    return future[1]


def _fallback_previous(
    ordered: list[TideEvent],
    next_event: TideEvent,
    now: datetime,
) -> TideEvent | None:
    """Look behind the next event when no typed event precedes now.

    Any typed event before now would already be the previous event, so this
    only ever finds an untyped one: the nearest event strictly before now.
    """
    index = next(i for i, event in enumerate(ordered) if event is next_event)
    candidates = [event for event in ordered[:index] if _aware(event.timestamp) < now]
    if candidates:
        return candidates[-1]
    return None


class TideStateResolver:
    """Classify the tidal phase from a snapshot of high/low predictions."""

    def __init__(self, slack_window_minutes: float = DEFAULT_SLACK_WINDOW) -> None:
        """Initialize the resolver."""
        self.slack_window_minutes = slack_window_minutes

    def resolve(self, events: Iterable[TideEvent], now: datetime) -> ResolvedTideState:
        """
        Resolve the tidal state at a given instant.

        Events may be unsorted, and a kind may be missing or a raw NOAA code.
        Events without a High/Low kind keep their place in time order but are
        never reported as the next or following event. An event exactly at
        ``now`` counts as upcoming.

        Args:
            events: High/low tide predictions
            now: Instant to classify (naive values are taken as UTC)

        Returns:
            ResolvedTideState; INDETERMINATE with no events when nothing usable
        """
        now = _aware(now)

        # sorted() is stable, so equal timestamps keep input order
        ordered = sorted(
            (
                _normalized(event) for event in events
                if isinstance(event, TideEvent) and isinstance(event.timestamp, datetime)
            ),
            key=lambda event: _aware(event.timestamp),
        )
        typed = [event for event in ordered if event.kind is not None]
        if not typed:
            _LOGGER.debug("No typed tide events among %d entries", len(ordered))
            return ResolvedTideState()

        past = [event for event in typed if _aware(event.timestamp) < now]
        future = [event for event in typed if _aware(event.timestamp) >= now]

        previous_event = past[-1] if past else None
        next_event = future[0] if future else None
        following_event = _following_event(future)

        if previous_event is None and next_event is not None:
            previous_event = _fallback_previous(ordered, next_event, now)

        return ResolvedTideState(
            previous_event=previous_event,
            next_event=next_event,
            following_event=following_event,
            phase=self._classify(previous_event, next_event, now),
        )

    def _classify(
        self,
        previous_event: TideEvent | None,
        next_event: TideEvent | None,
        now: datetime,
    ) -> TidePhase:
        window = self.slack_window_minutes

        if previous_event is not None and next_event is not None:
            minutes_to_next = (_aware(next_event.timestamp) - now).total_seconds() / 60
            minutes_since_previous = (now - _aware(previous_event.timestamp)).total_seconds() / 60

            if 0 <= minutes_to_next <= window:
                return _SLACK_APPROACHING[next_event.kind]
            if previous_event.kind is not None and 0 <= minutes_since_previous <= window:
                return _SLACK_AFTER[previous_event.kind]
            if next_event.kind is TideKind.HIGH:
                return TidePhase.FLOODING
            return TidePhase.EBBING

        if next_event is not None:
            return _APPROACHING[next_event.kind]
        if previous_event is not None:
            return _AFTER[previous_event.kind]
        return TidePhase.INDETERMINATE


def resolve_tide_state(
    events: Iterable[TideEvent],
    now: datetime,
    slack_window_minutes: float = DEFAULT_SLACK_WINDOW,
) -> ResolvedTideState:
    """Resolve the tidal state with a one-off resolver."""
    return TideStateResolver(slack_window_minutes).resolve(events, now)
