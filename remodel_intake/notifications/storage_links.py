"""
Storage link resolution — remodel_intake/notifications/storage_links.py
Turns uploaded image references into time-limited, publicly fetchable links
using the storage service's signing endpoint.
"""
from __future__ import annotations

import asyncio
import logging
import os
import re
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

_STORAGE_URL_RE = re.compile(r"/storage/v1/object/(?:public/|authenticated/|sign/)?([^/]+)/([^?]+)")


class StorageLinkResolver:
    """
    Resolve raw image references to signed URLs.

    A reference is either a bare object path ("quotes/abc/photo-1.jpg", taken
    to live in the default bucket) or a URL pointing at this project's storage.
    Anything else passes through unchanged. A storage reference that cannot
    be signed falls back to its public object URL so the image is never
    dropped from the emails.
    """

    def __init__(
        self,
        base_url: str | None = None,
        service_key: str | None = None,
        bucket: str | None = None,
        ttl_seconds: int | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else os.getenv("SUPABASE_URL", "")).rstrip("/")
        self.service_key = service_key if service_key is not None else os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
        self.bucket = bucket or os.getenv("STORAGE_BUCKET", "quote-images")
        self.ttl_seconds = ttl_seconds or int(os.getenv("SIGNED_URL_TTL_SECONDS", str(7 * 24 * 3600)))
        self._http = http_client

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.service_key)

    def parse_reference(self, reference: str) -> Optional[tuple[str, str]]:
        """Return (bucket, path) for a storage object reference, else None."""
        ref = reference.strip()
        if not ref:
            return None
        if "://" not in ref:
            return self.bucket, ref.lstrip("/")
        if not self.base_url or not ref.startswith(self.base_url):
            return None
        match = _STORAGE_URL_RE.search(ref)
        if not match:
            return None
        return match.group(1), match.group(2)

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path}"

    def fallback_url(self, reference: str) -> str:
        """Public object URL for a storage reference, the reference itself otherwise."""
        parsed = self.parse_reference(reference)
        if parsed is None or not self.base_url:
            return reference.strip()
        return self.public_url(*parsed)

    async def resolve_all(self, references: list[str]) -> list[str]:
        if not references:
            return []
        if not self.configured:
            return [self.fallback_url(ref) for ref in references]
        if self._http is not None:
            return list(await asyncio.gather(*(self._resolve(self._http, r) for r in references)))
        async with httpx.AsyncClient(timeout=10.0) as client:
            return list(await asyncio.gather(*(self._resolve(client, r) for r in references)))

    async def _resolve(self, client: httpx.AsyncClient, reference: str) -> str:
        parsed = self.parse_reference(reference)
        if parsed is None:
            return reference.strip()
        bucket, path = parsed
        try:
            response = await client.post(
                f"{self.base_url}/storage/v1/object/sign/{bucket}/{path}",
                json={"expiresIn": self.ttl_seconds},
                headers={
                    "Authorization": f"Bearer {self.service_key}",
                    "apikey": self.service_key,
                },
            )
            response.raise_for_status()
            signed = response.json().get("signedURL") or response.json().get("signedUrl")
            if not signed:
                raise ValueError("signing response had no signedURL")
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Could not sign %s/%s, using public object URL: %s", bucket, path, exc)
            return self.public_url(bucket, path)
        if signed.startswith("http"):
            return signed
        return f"{self.base_url}/storage/v1{signed}"
