"""Progress view of an order's fulfillment, derived from its status alone."""

from dataclasses import dataclass
from enum import Enum

from storefront.order.status import (
    LIFECYCLE,
    STEP_LABELS,
    OrderStatus,
    StatusInfo,
    parse_status,
    status_info,
    step_index,
)


class StepState(Enum):
    COMPLETE = "complete"
    CURRENT = "current"
    PENDING = "pending"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class ProgressStep:
    status: OrderStatus
    label: str
    state: StepState


@dataclass(frozen=True)
class ProgressView:
    steps: tuple[ProgressStep, ...]
    cancelled: bool
    percent: float
    headline: StatusInfo

    @property
    def current_step(self) -> ProgressStep | None:
        return next((step for step in self.steps if step.state == StepState.CURRENT), None)


def render_progress(status) -> ProgressView:
    """Render the four fulfillment steps for ``status``.

    Steps before the current one are complete, the current one is current and
    the rest are pending. A cancelled order shows every step as neutral with
    the cancelled marker set. A status that is not on the lifecycle shows
    every step as pending.
    """
    parsed = parse_status(status)
    headline = status_info(parsed)

    if parsed == OrderStatus.CANCELLED:
        steps = tuple(ProgressStep(s, STEP_LABELS[s], StepState.NEUTRAL) for s in LIFECYCLE)
        return ProgressView(steps=steps, cancelled=True, percent=100.0, headline=headline)

    current = step_index(parsed)
    steps = tuple(ProgressStep(s, STEP_LABELS[s], _state_of(i, current)) for i, s in enumerate(LIFECYCLE))
    percent = max(current, 0) / (len(LIFECYCLE) - 1) * 100
    return ProgressView(steps=steps, cancelled=False, percent=percent, headline=headline)


def _state_of(index: int, current: int) -> StepState:
    if current < 0:
        return StepState.PENDING
    if index < current:
        return StepState.COMPLETE
    if index == current:
        return StepState.CURRENT
    return StepState.PENDING
