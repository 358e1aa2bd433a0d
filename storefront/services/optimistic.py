"""Optimistic local mutation with an explicit inverse patch"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Inverse = Callable[[], None]


async def optimistic_mutation(
    apply: Callable[[], Inverse],
    remote: Callable[[], Awaitable[T]],
    is_current: Optional[Callable[[], bool]] = None,
    rollback: bool = True,
) -> T:
    """
    Apply a local change, then confirm it remotely.

    `apply` performs the local change and returns the inverse patch that
    undoes it; the patch is captured before the remote call starts. When
    the remote call fails the patch is applied, unless `rollback` is off or
    `is_current` reports that a later change superseded this one, and the
    error is re-raised.
    """
    inverse = apply()
    try:
        return await remote()
    except BaseException:
        if not rollback:
            logger.info("Remote call failed; keeping optimistic change")
        elif is_current is not None and not is_current():
            logger.info("Remote call failed for a superseded change; not rolling back")
        else:
            inverse()
        raise
