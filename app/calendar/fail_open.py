from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Generic, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger("app.calendar.advisory")


@dataclass(frozen=True)
class Checked(Generic[T]):
    """A value that is always usable, plus the error swallowed to get it."""
    value: T
    ignored: Optional[BaseException] = None

    @property
    def degraded(self) -> bool:
        return self.ignored is not None


async def fail_open(awaitable: Awaitable[T], fallback: T, *, label: str) -> Checked[T]:
    """Await ``awaitable``; on any ``Exception`` log it and yield ``fallback``.

    Only for checks that must never block a user action. Cancellation still
    propagates.
    """
    try:
        return Checked(await awaitable)
    except Exception as e:
        logger.warning("advisory check failed open label=%s reason=%r", label, e)
        return Checked(fallback, ignored=e)
