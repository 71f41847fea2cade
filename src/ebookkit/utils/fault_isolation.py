"""Best-effort mapping over independently fallible operations.

One failing item must never abort the aggregate: failures are routed to a
structlog warning and collected, successes are returned in input order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Iterable, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BestEffortResult(Generic[T, R]):
    """Outcome of a best-effort map."""

    successes: list[tuple[T, R]] = field(default_factory=list)
    failures: list[tuple[T, Exception]] = field(default_factory=list)

    @property
    def values(self) -> list[R]:
        return [value for _, value in self.successes]


async def best_effort_map(
    items: Iterable[T],
    operation: Callable[[T], Awaitable[R]],
    *,
    event: str,
    **log_context,
) -> BestEffortResult[T, R]:
    """Await operation(item) for each item in order, isolating failures.

    Args:
        items: Inputs, processed sequentially
        operation: Coroutine function applied to each item
        event: structlog event name used for failures
        **log_context: Extra fields attached to failure logs

    Returns:
        BestEffortResult with ordered successes and failures
    """
    result: BestEffortResult[T, R] = BestEffortResult()

    for item in items:
        try:
            value = await operation(item)
        except Exception as e:
            logger.warning(event, item=item, error=str(e), **log_context)
            result.failures.append((item, e))
            continue
        result.successes.append((item, value))

    return result
