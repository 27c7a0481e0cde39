"""
Solana JSON-RPC client.

Thin aiohttp client for the handful of RPC methods the collect pipeline
needs. Transport errors are retried with exponential backoff.
"""

import asyncio
import base64
import re
import time
from typing import Any, List, Optional, Tuple

import aiohttp
import base58
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from glaneur.domain.exceptions import TransactionRejectedError, UpstreamError
from glaneur.domain.services.i_chain_client import IChainClient, SignatureStatus
from glaneur.infrastructure.monitoring import get_logger, metrics

logger = get_logger(__name__)

LEAF_ASSET_ID_PATTERN = re.compile(r"[Ll]eaf asset ID: ([A-Za-z0-9]+)")

# Returned by preflight when an earlier attempt already reached the node
ALREADY_PROCESSED_MARKERS = ("already been processed", "AlreadyProcessed")


class RpcError(Exception):
    """JSON-RPC level error returned by the node."""

    def __init__(self, method: str, error: dict):
        self.method = method
        self.code = error.get("code")
        self.message = error.get("message", "Unknown RPC error")
        self.data = error.get("data")
        super().__init__(f"{method}: {self.message}")

    @property
    def already_processed(self) -> bool:
        """Node has already seen this exact transaction."""
        detail = f"{self.message} {self.data or ''}"
        return any(marker in detail for marker in ALREADY_PROCESSED_MARKERS)


def parse_asset_id(log_messages: List[str]) -> Optional[str]:
    """Find the Bubblegum 'Leaf asset ID' line in transaction logs."""
    for line in log_messages or []:
        match = LEAF_ASSET_ID_PATTERN.search(line)
        if match:
            return match.group(1)
    return None


class SolanaRpcClient(IChainClient):
    """
    Solana RPC client with retries and bounded timeouts.

    One aiohttp session is reused for all calls and closed on shutdown.
    """

    def __init__(
        self,
        rpc_url: str,
        commitment: str = "confirmed",
        total_timeout: float = 10,
        connect_timeout: float = 3,
        max_retries: int = 3,
        retry_min_delay: float = 1,
        retry_max_delay: float = 4,
    ):
        """
        Initialize Solana RPC client.

        Args:
            rpc_url: Solana RPC endpoint URL
            commitment: Commitment level for reads
            total_timeout: Total request timeout in seconds (default: 10s)
            connect_timeout: Connection timeout in seconds (default: 3s)
            max_retries: Max attempts for transient failures (default: 3)
            retry_min_delay: Initial backoff in seconds
            retry_max_delay: Backoff ceiling in seconds
        """
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.timeout = aiohttp.ClientTimeout(
            total=total_timeout,
            connect=connect_timeout,
        )
        self.max_retries = max_retries
        self.retry_min_delay = retry_min_delay
        self.retry_max_delay = retry_max_delay
        self._session: Optional[aiohttp.ClientSession] = None
        self._request_id = 0

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                connector=aiohttp.TCPConnector(
                    limit=100,
                    limit_per_host=30,
                    ttl_dns_cache=300,
                ),
            )
        return self._session

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _call(self, method: str, params: list) -> Any:
        """
        Call an RPC method with retries on transport errors.

        Raises:
            RpcError: If the node answers with a JSON-RPC error
            UpstreamError: If the node is unreachable after retries
        """
        start = time.time()
        metrics.blockchain_requests_total.labels(operation=method).inc()

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                wait=wait_exponential(
                    multiplier=self.retry_min_delay,
                    min=self.retry_min_delay,
                    max=self.retry_max_delay,
                ),
                retry=retry_if_exception_type(
                    (aiohttp.ClientError, asyncio.TimeoutError)
                ),
                reraise=True,
            ):
                with attempt:
                    return await self._call_once(method, params)
        except RpcError:
            metrics.blockchain_errors_total.labels(
                operation=method, error_type="rpc_error"
            ).inc()
            raise
        except aiohttp.ClientResponseError as e:
            metrics.blockchain_errors_total.labels(
                operation=method, error_type="http_error"
            ).inc()
            raise UpstreamError(
                f"Solana RPC {method} failed with HTTP {e.status}",
                status_code=e.status,
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            metrics.blockchain_errors_total.labels(
                operation=method, error_type=type(e).__name__
            ).inc()
            raise UpstreamError(
                f"Solana RPC {method} unavailable after {self.max_retries} attempts"
            ) from e
        finally:
            metrics.blockchain_request_duration_seconds.labels(
                operation=method
            ).observe(time.time() - start)

    async def _call_once(self, method: str, params: list) -> Any:
        session = await self._get_session()
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        async with session.post(self.rpc_url, json=payload) as response:
            response.raise_for_status()
            data = await response.json()

        if data.get("error"):
            raise RpcError(method, data["error"])
        return data.get("result")

    async def _read(self, method: str, params: list) -> Any:
        """Call a read-only method; JSON-RPC errors become UpstreamError."""
        try:
            return await self._call(method, params)
        except RpcError as e:
            raise UpstreamError(f"Solana RPC {method} error: {e.message}") from e

    async def get_latest_blockhash(self) -> Tuple[str, int]:
        result = await self._read(
            "getLatestBlockhash", [{"commitment": self.commitment}]
        )
        value = result["value"]
        return value["blockhash"], int(value["lastValidBlockHeight"])

    async def send_transaction(self, transaction: bytes) -> str:
        encoded = base64.b64encode(transaction).decode("ascii")
        try:
            return await self._call(
                "sendTransaction",
                [
                    encoded,
                    {
                        "encoding": "base64",
                        "preflightCommitment": self.commitment,
                    },
                ],
            )
        except RpcError as e:
            tx_signature = _signature_of(transaction)
            if e.already_processed:
                logger.info(
                    "Transaction already processed by the node",
                    extra={"tx_signature": tx_signature},
                )
                return tx_signature
            raise TransactionRejectedError(
                tx_signature=tx_signature,
                reason=e.message,
            ) from e

    async def get_signature_status(self, tx_signature: str) -> Optional[SignatureStatus]:
        result = await self._read(
            "getSignatureStatuses",
            [[tx_signature], {"searchTransactionHistory": True}],
        )
        values = (result or {}).get("value") or [None]
        status = values[0]
        if status is None:
            return None
        return SignatureStatus(
            confirmation_status=status.get("confirmationStatus"),
            err=status.get("err"),
        )

    async def get_block_height(self) -> int:
        result = await self._read("getBlockHeight", [{"commitment": self.commitment}])
        return int(result)

    async def get_asset_id(self, tx_signature: str) -> Optional[str]:
        result = await self._read(
            "getTransaction",
            [
                tx_signature,
                {
                    "encoding": "json",
                    "commitment": "confirmed",
                    "maxSupportedTransactionVersion": 0,
                },
            ],
        )
        if not result:
            return None
        return parse_asset_id((result.get("meta") or {}).get("logMessages") or [])


def _signature_of(transaction: bytes) -> str:
    """First signature of a serialized transaction, base58 encoded."""
    # Wire format: compact-u16 signature count, then 64-byte signatures
    return base58.b58encode(transaction[1:65]).decode("ascii")
