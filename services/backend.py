"""
services/backend.py — Remote data service client for Shadow Pieces.

The entity catalog and the couple's gold wallet live in a hosted
PostgREST-style backend. This client covers the three calls the game
needs:

    fetch_entity_pool()   GET  /rest/v1/<table>?select=id,name_ko,rarity...
    grant_currency(n)     POST /rest/v1/rpc/add_gold
    spend_currency(n)     POST /rest/v1/rpc/spend_gold

Network and HTTP failures are turned into domain results at this
boundary: the pool fetch raises PoolFetchError / EmptyPoolError, the
wallet calls return False. Nothing above this module sees aiohttp errors.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Iterable, Optional

import aiohttp

from core.errors import EmptyPoolError, PoolFetchError
from settings import (
    BACKEND_API_KEY, BACKEND_URL, COUPLE_ID, ENTITY_TABLE, POOL_SIZE, REQUEST_TIMEOUT_S,
)
from stages.entity import Entity

logger = logging.getLogger(__name__)


def parse_pool(rows: Iterable[dict]) -> list[Entity]:
    """Turn catalog rows into eligible entities.

    Rows that are not objects, or lack an id or display name, are dropped,
    as are repeated ids (first occurrence wins).

    Args:
        rows: Decoded JSON rows from the catalog table.

    Returns:
        Eligible entities in response order.
    """
    seen: set[str] = set()
    entities: list[Entity] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        entity = Entity.from_row(row)
        if entity is None or entity.id in seen:
            continue
        seen.add(entity.id)
        entities.append(entity)
    return entities


class BackendClient:
    """Async client for the catalog and wallet endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        couple_id: Optional[str] = None,
        table: str = ENTITY_TABLE,
        timeout_s: float = REQUEST_TIMEOUT_S,
    ):
        """Initialize the client.

        Args:
            base_url:  Backend root URL. Defaults to BACKEND_URL.
            api_key:   Anonymous/service key sent as apikey and bearer token.
            couple_id: Wallet owner for gold grants and spends.
            table:     Catalog table holding the guessable entities.
            timeout_s: Total timeout per request in seconds.
        """
        self._base_url = (base_url or BACKEND_URL).rstrip("/")
        self._api_key = api_key if api_key is not None else BACKEND_API_KEY
        self._couple_id = couple_id if couple_id is not None else COUPLE_ID
        self._table = table
        self._timeout_s = timeout_s
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            headers = {"Content-Type": "application/json"}
            if self._api_key:
                headers["apikey"] = self._api_key
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout_s),
                headers=headers,
            )
        return self._session

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    # ── Catalog ───────────────────────────────────────────────────────────────

    async def fetch_entity_pool(self, limit: int = POOL_SIZE) -> list[Entity]:
        """Fetch up to `limit` named entities for round generation.

        Raises:
            PoolFetchError: On network failure, a non-200 response, or a
                body that is not a JSON list of rows.
            EmptyPoolError: If no eligible rows came back.
        """
        session = await self._get_session()
        url = f"{self._base_url}/rest/v1/{self._table}"
        params = {
            "select": "id,name_ko,rarity",
            "name_ko": "not.is.null",
            "limit": str(limit),
        }

        try:
            async with session.get(url, params=params) as response:
                if response.status != 200:
                    detail = (await response.text())[:200]
                    raise PoolFetchError(f"entity pool request failed: HTTP {response.status} {detail}")
                rows = await response.json()
        except ValueError as exc:
            logger.warning(f"Entity pool response is not JSON: {exc}")
            raise PoolFetchError(f"entity pool response is not JSON: {exc}") from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning(f"Entity pool request error: {exc}")
            raise PoolFetchError(f"entity pool request failed: {exc}") from exc

        if rows is None:
            rows = []
        if not isinstance(rows, list):
            logger.warning(f"Entity pool response is {type(rows).__name__}, expected a list")
            raise PoolFetchError("entity pool response is not a list of rows")

        entities = parse_pool(rows)
        if not entities:
            raise EmptyPoolError("no eligible entities in the catalog")
        logger.info(f"Loaded entity pool: {len(entities)} entities")
        return entities

    # ── Wallet ────────────────────────────────────────────────────────────────

    async def grant_currency(self, amount: int) -> bool:
        """Add gold to the couple wallet.

        Args:
            amount: Non-negative amount. Zero succeeds without a request.

        Returns:
            True if the backend confirmed the grant.
        """
        if amount < 0:
            raise ValueError("grant amount cannot be negative")
        if amount == 0:
            return True
        return await self._rpc("add_gold", amount)

    async def spend_currency(self, amount: int) -> bool:
        """Take gold from the couple wallet (entry fee).

        Returns:
            True if the backend accepted the spend, False if it refused
            (for example insufficient gold) or could not be reached.
        """
        if amount < 0:
            raise ValueError("spend amount cannot be negative")
        if amount == 0:
            return True
        return await self._rpc("spend_gold", amount)

    async def _rpc(self, name: str, amount: int) -> bool:
        session = await self._get_session()
        url = f"{self._base_url}/rest/v1/rpc/{name}"
        payload = {"p_couple_id": self._couple_id, "p_amount": amount}

        try:
            async with session.post(url, json=payload) as response:
                if response.status in (200, 204):
                    logger.info(f"Wallet {name}({amount}) ok")
                    return True
                detail = (await response.text())[:200]
                logger.warning(f"Wallet {name}({amount}) refused: HTTP {response.status} {detail}")
                return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning(f"Wallet {name}({amount}) error: {exc}")
            return False
