"""Openverse image search with a client-credentials token."""

import os
import re
import time
from dataclasses import dataclass
from typing import Callable, Optional
import httpx
import logging

from pydantic import BaseModel


logger = logging.getLogger(__name__)

OPENVERSE_API_BASE = "https://api.openverse.org/v1"


class OpenverseAuthError(Exception):
    """Raised when an Openverse token cannot be obtained."""


class OpenverseImage(BaseModel):
    id: str = ""
    title: str = "Untitled Image"
    url: str
    creator: str = "Unknown Creator"
    creator_url: str = ""
    license: str = ""
    license_version: str = ""
    license_url: str = ""
    attribution: str = ""


@dataclass
class OpenverseCredential:
    """Bearer token with the wall-clock time (epoch seconds) it stops being valid."""

    access_token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return bool(self.access_token) and now < self.expires_at


def clean_image_query(query: str) -> str:
    """Strip batch-request phrasing so only the topic is searched."""
    query = re.sub(r"Generate \d+ articles? about ", "", query, flags=re.IGNORECASE)
    query = re.sub(r"with length between \d+ and \d+ words each", "", query, flags=re.IGNORECASE)
    return query.strip()


class OpenverseClient:
    """
    Client for the Openverse image API.

    Owns its credential: a token is requested on first use and refreshed once
    its expiry timestamp has passed.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        base_url: str = OPENVERSE_API_BASE,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.client_id = client_id or os.getenv("OPENVERSE_CLIENT_ID")
        self.client_secret = client_secret or os.getenv("OPENVERSE_CLIENT_SECRET")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._clock = clock
        self.credential: Optional[OpenverseCredential] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def get_token(self) -> str:
        """Return a valid bearer token, requesting a new one if needed."""
        if self.credential and self.credential.is_valid(self._clock()):
            return self.credential.access_token

        if not self.is_configured:
            raise OpenverseAuthError("Openverse credentials not configured")

        async with self._http_client() as client:
            try:
                response = await client.post(
                    f"{self.base_url}/auth_tokens/token/",
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "grant_type": "client_credentials",
                    },
                )
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as e:
                raise OpenverseAuthError(f"Failed to get Openverse token: {e}") from e

        try:
            self.credential = OpenverseCredential(
                access_token=data["access_token"],
                expires_at=self._clock() + float(data.get("expires_in", 0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise OpenverseAuthError(f"Malformed Openverse token response: {e}") from e

        logger.info("Obtained new Openverse access token")
        return self.credential.access_token

    async def search_images(self, query: str, max_images: int = 5) -> list[OpenverseImage]:
        """
        Search for openly licensed images.

        Raises OpenverseAuthError or httpx.HTTPError; callers decide how to degrade.
        """
        token = await self.get_token()
        clean_query = clean_image_query(query)
        logger.info(f"Fetching images for topic: {clean_query}")

        async with self._http_client() as client:
            response = await client.get(
                f"{self.base_url}/images/",
                params={"q": clean_query, "page_size": str(max_images), "mature": "false"},
                headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            )
            response.raise_for_status()
            data = response.json()

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            logger.error(f"Invalid response format from Openverse API: {str(data)[:200]}")
            return []

        images = []
        for item in results:
            if not isinstance(item, dict) or not item.get("url"):
                continue
            creator = item.get("creator") or "Unknown Creator"
            images.append(
                OpenverseImage(
                    id=str(item.get("id") or ""),
                    title=item.get("title") or "Untitled Image",
                    url=item["url"],
                    creator=creator,
                    creator_url=item.get("creator_url") or "",
                    license=item.get("license") or "",
                    license_version=item.get("license_version") or "",
                    license_url=item.get("license_url") or "",
                    attribution=item.get("attribution") or f"Image by {creator}",
                )
            )
        return images
