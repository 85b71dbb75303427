# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

from collections.abc import Callable
from dataclasses import dataclass
from time import monotonic, sleep
from typing import Generic, TypeVar

T = TypeVar("T")

Sleep = Callable[[float], None]
Clock = Callable[[], float]


@dataclass(frozen=True)
class PollResult(Generic[T]):
    done: bool
    last_value: T
    checks: int


def poll_until(
    fetch: Callable[[], T],
    is_done: Callable[[T], bool],
    timeout: float,
    interval: float,
    on_check: Callable[[T], None] = lambda _: None,
    sleep: Sleep = sleep,
    clock: Clock = monotonic,
) -> PollResult[T]:
    """Call `fetch` every `interval` seconds until `is_done` accepts its value or `timeout` elapses.

    Checks only start before `timeout` has elapsed, so the loop returns
    within timeout + interval (plus the duration of the last fetch).
    """
    start = clock()
    checks = 0
    while True:
        value = fetch()
        checks += 1
        on_check(value)
        if is_done(value):
            return PollResult(True, value, checks)
        sleep(interval)
        if clock() - start >= timeout:
            return PollResult(False, value, checks)
