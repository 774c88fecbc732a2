"""
Channel data source backed by LND's REST API.

The httpx client is created on first use and reused for every query.
Errors raise LndRequestError so the query processor can report them;
there are no retries at this layer.
"""

import logging
import os
import ssl
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger("lnd-query.lnd")


class LndRequestError(Exception):
    """An LND REST call failed (HTTP status or transport error)."""


def read_macaroon_hex(path: str) -> str:
    with open(path, "rb") as f:
        return f.read().hex()


class LndRestClient:
    """Async client for the subset of LND REST used by the query pipeline."""

    def __init__(self, rest_url: str, macaroon_hex: str = "",
                 tls_cert_path: Optional[str] = None, timeout: float = 30.0,
                 allow_insecure_tls: bool = False,
                 client: Optional[httpx.AsyncClient] = None):
        self.rest_url = rest_url.rstrip("/")
        self.macaroon_hex = macaroon_hex
        self.tls_cert_path = tls_cert_path
        self.timeout = timeout
        self.allow_insecure_tls = allow_insecure_tls
        self.client = client

    @classmethod
    def from_config(cls, config) -> 'LndRestClient':
        return cls(
            rest_url=config.rest_url,
            macaroon_hex=read_macaroon_hex(config.macaroon_path),
            tls_cert_path=config.tls_cert_path,
            timeout=config.http_timeout,
            allow_insecure_tls=config.allow_insecure_tls,
        )

    def _verify(self) -> Any:
        if self.tls_cert_path and os.path.exists(self.tls_cert_path):
            ssl_context = ssl.create_default_context()
            ssl_context.load_verify_locations(self.tls_cert_path)
            return ssl_context
        if self.rest_url.startswith("https://"):
            if not self.allow_insecure_tls:
                raise ValueError(
                    f"TLS verification required for {self.rest_url} but no tls cert configured. "
                    "Set LND_ALLOW_INSECURE_TLS=true to override (not recommended)."
                )
            logger.warning(f"TLS verification disabled for {self.rest_url} (no tls cert configured).")
        return False

    async def connect(self) -> httpx.AsyncClient:
        """Return the shared HTTP client, creating it on first use."""
        if self.client is None:
            # SECURITY: Never log the macaroon or request headers containing it
            self.client = httpx.AsyncClient(
                base_url=self.rest_url,
                headers={"Grpc-Metadata-macaroon": self.macaroon_hex},
                verify=self._verify(),
                timeout=self.timeout,
            )
            logger.info(f"Connected to LND at {self.rest_url}")
        return self.client

    async def close(self):
        if self.client:
            await self.client.aclose()
            self.client = None

    async def _get(self, path: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        client = await self.connect()
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            try:
                body = e.response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            error_msg = (
                body.get("message")
                or body.get("error")
                or e.response.text.strip()
                or f"HTTP {e.response.status_code} from LND"
            )
            raise LndRequestError(error_msg) from e
        except httpx.HTTPError as e:
            error_msg = str(e) or f"{type(e).__name__} connecting to {self.rest_url}"
            raise LndRequestError(error_msg) from e

    async def get_info(self) -> Dict[str, Any]:
        return await self._get("/v1/getinfo")

    async def list_channels(self) -> List[Dict[str, Any]]:
        """Raw channel records from GET /v1/channels."""
        result = await self._get("/v1/channels")
        return result.get("channels") or []

    async def lookup_node_alias(self, pubkey: str) -> Dict[str, Any]:
        result = await self._get(f"/v1/graph/node/{pubkey}",
                                 params={"include_channels": "false"})
        node = result.get("node") or {}
        return {"alias": node.get("alias")}
