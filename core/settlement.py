"""
core/settlement.py — One-time currency grant at the end of a session.

The result screen can be closed by its button or by clicking outside it,
and both paths end up calling claim(). The guard below makes sure the
grant request is issued at most once per session.

    _in_flight  set before the request is issued, cleared when it settles
    _claimed    set only after the service confirms the grant

A failed grant leaves _claimed unset and raises GrantError so the caller
can show a notice. Nothing here retries on its own.
"""

from __future__ import annotations
import asyncio
import logging
from enum import Enum, auto
from typing import Awaitable, Callable

import aiohttp

from core.errors import GrantError

logger = logging.getLogger(__name__)

GrantFunc = Callable[[int], Awaitable[bool]]


class ClaimOutcome(Enum):
    GRANTED = auto()   # the service confirmed the grant on this call
    SKIPPED = auto()   # already claimed or a claim is in flight; nothing sent


class Settlement:
    """Idempotent wrapper around the external currency grant.

    Attributes:
        _grant:     Coroutine function granting an amount, returns success.
        _claimed:   True once a grant has been confirmed.
        _in_flight: True while a grant request is outstanding.
    """

    def __init__(self, grant: GrantFunc) -> None:
        self._grant = grant
        self._claimed = False
        self._in_flight = False

    @property
    def claimed(self) -> bool:
        return self._claimed

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def claim(self, total: int) -> ClaimOutcome:
        """Grant the session total exactly once.

        Args:
            total: Final running total. Zero is a successful no-op.

        Returns:
            GRANTED on the call that performed the grant, SKIPPED on every
            call after it or while one is still outstanding.

        Raises:
            GrantError: If the service refused or could not be reached.
                        The claim stays open in that case.
        """
        if self._claimed or self._in_flight:
            return ClaimOutcome.SKIPPED
        self._in_flight = True

        try:
            if total <= 0:
                ok = True
            else:
                ok = await self._grant(total)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning("Currency grant of %d failed: %s", total, exc)
            raise GrantError(f"grant of {total} failed: {exc}") from exc
        finally:
            self._in_flight = False

        if not ok:
            logger.warning("Currency grant of %d was refused", total)
            raise GrantError(f"grant of {total} was refused")

        self._claimed = True
        logger.info("Granted %d to the couple wallet", total)
        return ClaimOutcome.GRANTED
