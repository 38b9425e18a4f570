"""
Minimal JSON-RPC client for EVM nodes over HTTP.
Only the two calls the pollers need: current block height and event logs.
"""
import itertools
import logging
from typing import Any, List, Optional

import aiohttp

from core.models import RawEvent

logger = logging.getLogger(__name__)


class RpcError(Exception):
    """Raised when the node answers with an error or an unusable result."""


class EvmRpcClient:
    """
    Async JSON-RPC client bound to one node URL.

    The aiohttp session is opened by connect() and reused for every call
    until close().
    """

    def __init__(self, rpc_url: str, timeout: float = 30.0):
        """Initialize client for an RPC endpoint."""
        self.rpc_url = rpc_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None
        self._ids = itertools.count(1)

    async def connect(self):
        """Open the HTTP session if it is not already open."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)

    async def close(self):
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _call(self, method: str, params: list) -> Any:
        """
        Send one JSON-RPC request and return its result.

        Raises:
            RpcError: on non-200 status, a non-JSON body or a JSON-RPC error
            aiohttp.ClientError, asyncio.TimeoutError: on transport failure
        """
        await self.connect()

        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params
        }

        async with self._session.post(self.rpc_url, json=payload) as resp:
            if resp.status != 200:
                raise RpcError(f"{method} failed: HTTP {resp.status}")
            try:
                data = await resp.json(content_type=None)
            except ValueError as e:
                # Rate limiters and proxies answer 200 with an HTML page
                raise RpcError(f"{method} returned a non-JSON body: {e}") from e

        if not isinstance(data, dict):
            raise RpcError(f"{method} returned a non-object response")
        if data.get("error"):
            error = data["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise RpcError(f"{method} error: {message}")
        if "result" not in data:
            raise RpcError(f"{method} response has no result")

        return data["result"]

    async def get_block_number(self) -> int:
        """Get the current chain head."""
        result = await self._call("eth_blockNumber", [])
        try:
            return int(result, 16)
        except (TypeError, ValueError):
            raise RpcError(f"eth_blockNumber returned invalid block number: {result!r}")

    async def get_logs(
        self,
        address: str,
        topic: str,
        from_block: int,
        to_block: int
    ) -> List[RawEvent]:
        """
        Get logs for a contract and event signature in [from_block, to_block].

        Returns:
            List of RawEvent in the order the node returned them
        """
        params = [{
            "address": address,
            "topics": [topic],
            "fromBlock": hex(from_block),
            "toBlock": hex(to_block),
        }]
        result = await self._call("eth_getLogs", params)

        if not isinstance(result, list):
            raise RpcError(f"eth_getLogs returned {type(result).__name__}, expected a list")

        events = []
        for log in result:
            try:
                events.append(RawEvent.from_rpc_log(log))
            except (AttributeError, TypeError, ValueError) as e:
                # Not a conforming Transfer log, same as a decoder rejection
                logger.debug(f"Skipping malformed log: {e}")
        return events
