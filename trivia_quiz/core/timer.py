from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable

Clock = Callable[[], float]

DEFAULT_CLOCK: Clock = time.monotonic


@dataclass
class Countdown:
    """Cancellable per-question countdown bound to the index it was started for."""

    index: int
    duration_seconds: int
    started_at: float
    cancelled: bool = False


def start(index: int, duration_seconds: int, clock: Clock = DEFAULT_CLOCK) -> Countdown:
    return Countdown(index=index, duration_seconds=duration_seconds, started_at=clock())


def cancel(countdown: Countdown | None) -> None:
    if countdown is not None:
        countdown.cancelled = True


def remaining_seconds(countdown: Countdown, clock: Clock = DEFAULT_CLOCK) -> int:
    """Whole seconds left, counted down at 1-second resolution."""
    if countdown.cancelled:
        return 0
    elapsed = max(0.0, clock() - countdown.started_at)
    return max(0, countdown.duration_seconds - math.floor(elapsed))


def expired(countdown: Countdown, clock: Clock = DEFAULT_CLOCK) -> bool:
    return remaining_seconds(countdown, clock) <= 0


def claim_expiry(countdown: Countdown | None, index: int, clock: Clock = DEFAULT_CLOCK) -> bool:
    """
    Return True exactly once for a live countdown that ran out on ``index``.

    The countdown is cancelled when claimed, so a second poll (or a stale
    handle left over from an earlier question) never fires.
    """
    if countdown is None or countdown.cancelled or countdown.index != index:
        return False
    if not expired(countdown, clock):
        return False
    countdown.cancelled = True
    return True
