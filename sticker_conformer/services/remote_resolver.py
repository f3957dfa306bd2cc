"""Tenor share link resolution and media download.

This module turns a Tenor share link into a local file the transcode engine
can consume: it extracts the numeric post id from the link, asks the Tenor v2
API for the post, picks the best media variant and streams it to disk.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import httpx
from loguru import logger

from ..config.common import (
    TENOR_API_KEY,
    TENOR_API_URL,
    TENOR_MEDIA_PRIORITY,
    TENOR_TIMEOUT_SECONDS,
)
from ..config.policy import MAX_INPUT_BYTES
from ..domain.exceptions import (
    AssetNotFoundError,
    InvalidLinkError,
    NetworkError,
    OversizeError,
    ProviderError,
)
from ..domain.media import MediaAsset
from ..domain.models import RemoteAssetRef
from ..utils.fallback import first_match
from ..utils.format_utils import formatted_size

# Most specific first, so a general pattern never grabs a wrong segment of a
# more specific URL shape. The optional segment before "view" is a locale
# ("id", "pt-BR", ...).
TENOR_ID_PATTERNS = (
    re.compile(r"tenor\.com/(?:[a-z]{2}(?:-[a-z]{2})?/)?view/[^/]+-(\d+)$", re.IGNORECASE),
    re.compile(r"tenor\.com/(?:[a-z]{2}(?:-[a-z]{2})?/)?view/.*-(\d+)$", re.IGNORECASE),
    re.compile(r"tenor\.com/.*/(\d+)$", re.IGNORECASE),
)
TENOR_HOST_PATTERN = re.compile(r"(?:^|[/.])tenor\.com(?:[/:?#]|$)", re.IGNORECASE)

DOWNLOAD_CHUNK_SIZE = 64 * 1024


def normalize_link(url: str) -> str:
    """Adds a scheme when missing and drops query, fragment and trailing slash."""
    url = url.strip()
    if not url.lower().startswith(("http://", "https://")):
        url = f"https://{url}"
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path.rstrip("/"), "", ""))


def is_remote_link(text: str | None) -> bool:
    """Returns True if the text looks like a Tenor link."""
    if not text or not isinstance(text, str):
        return False
    return bool(TENOR_HOST_PATTERN.search(normalize_link(text)))


class TenorResolver:
    """Resolves Tenor share links and downloads their media.

    The HTTP client is created lazily and can be injected for testing.
    """

    def __init__(
        self,
        api_key: str = TENOR_API_KEY,
        api_url: str = TENOR_API_URL,
        timeout_seconds: float = TENOR_TIMEOUT_SECONDS,
        media_priority: tuple[str, ...] = TENOR_MEDIA_PRIORITY,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._timeout = timeout_seconds
        self._media_priority = media_priority
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout, follow_redirects=True)
        return self._client

    def close(self) -> None:
        """Close the HTTP client if this resolver created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> TenorResolver:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @staticmethod
    def extract_id(share_url: str) -> str:
        """Extracts the numeric Tenor post id from a share link.

        Raises:
            InvalidLinkError: If no known URL shape matches.
        """
        normalized = normalize_link(share_url or "")
        for pattern in TENOR_ID_PATTERNS:
            match = pattern.search(normalized)
            if match:
                return match.group(1)
        raise InvalidLinkError(
            f"Not a valid Tenor link: {share_url!r}. Expected e.g. tenor.com/view/name-gif-123456"
        )

    def _fetch_post(self, tenor_id: str) -> dict[str, Any]:
        if not self._api_key:
            raise ProviderError("No Tenor API key configured (set TENOR_API_KEY).")
        client = self._get_client()
        try:
            response = client.get(
                self._api_url,
                params={"key": self._api_key, "ids": tenor_id},
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Tenor API error: {e.response.status_code} {e.response.text[:200]}")
            raise ProviderError(f"Tenor API error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Cannot reach Tenor: {e}") from e
        except ValueError as e:
            raise ProviderError("Tenor returned an invalid response") from e

        results = data.get("results") if isinstance(data, dict) else None
        if results is not None and not isinstance(results, list):
            raise ProviderError("Tenor returned an invalid response")
        if not results:
            raise AssetNotFoundError(f"No Tenor post with id {tenor_id}")
        if not isinstance(results[0], dict):
            raise ProviderError("Tenor returned an invalid response")
        return results[0]

    def select_variant(self, media_formats: dict[str, Any]) -> tuple[str, str] | None:
        """Picks the highest-fidelity media variant that has a URL.

        Returns:
            `(variant_name, url)`, or None if no known variant is present.
        """

        def candidate(name: str):
            def pick() -> tuple[str, str] | None:
                variant = media_formats.get(name) or {}
                url = variant.get("url") if isinstance(variant, dict) else None
                return (name, url) if url else None

            return pick

        return first_match(candidate(name) for name in self._media_priority)

    def resolve(self, share_url: str) -> RemoteAssetRef:
        """Resolves a share link to the URL of its best media variant.

        Raises:
            InvalidLinkError: If no id can be extracted.
            AssetNotFoundError: If the post or all of its variants are missing.
            ProviderError: If the API call fails.
        """
        tenor_id = self.extract_id(share_url)
        logger.info(f"Tenor ID: {tenor_id}")
        post = self._fetch_post(tenor_id)

        selected = self.select_variant(post.get("media_formats") or {})
        if selected is None:
            raise AssetNotFoundError(f"Tenor post {tenor_id} has no usable media variant")
        variant, url = selected

        ref = RemoteAssetRef(
            provider_id=tenor_id,
            resolved_source_url=url,
            display_title=post.get("content_description") or "tenor_gif",
            variant=variant,
        )
        logger.info(f"Resolved Tenor {tenor_id} '{ref.display_title}' to {variant}: {url}")
        return ref

    def fetch(self, ref: RemoteAssetRef, destination: Path, max_bytes: int = MAX_INPUT_BYTES) -> MediaAsset:
        """Streams the media of `ref` to `destination`.

        The download is aborted as soon as it exceeds `max_bytes`. A partial
        file is always removed on failure.

        Raises:
            OversizeError: If the media exceeds `max_bytes`.
            NetworkError: On timeout or connection failure.
            ProviderError: If the media host answers with an error status.
        """
        client = self._get_client()
        written = 0
        try:
            with client.stream("GET", ref.resolved_source_url, timeout=self._timeout) as response:
                response.raise_for_status()
                with destination.open("wb") as f:
                    for chunk in response.iter_bytes(DOWNLOAD_CHUNK_SIZE):
                        written += len(chunk)
                        if written > max_bytes:
                            raise OversizeError(
                                f"Tenor media exceeds {formatted_size(max_bytes)}"
                            )
                        f.write(chunk)
        except OversizeError:
            destination.unlink(missing_ok=True)
            raise
        except httpx.HTTPStatusError as e:
            destination.unlink(missing_ok=True)
            raise ProviderError(f"Tenor media download failed: {e.response.status_code}") from e
        except httpx.TimeoutException as e:
            destination.unlink(missing_ok=True)
            raise NetworkError(f"Tenor media download timed out: {e}") from e
        except httpx.HTTPError as e:
            destination.unlink(missing_ok=True)
            raise NetworkError(f"Tenor media download failed: {e}") from e
        except OSError:
            destination.unlink(missing_ok=True)
            raise

        logger.info(f"Downloaded Tenor {ref.provider_id}: {formatted_size(written)}")
        suffix = Path(urlsplit(ref.resolved_source_url).path).suffix or ".gif"
        return MediaAsset(
            local_path=destination,
            declared_mime_type="image/gif" if suffix.lower() == ".gif" else None,
            declared_file_name=f"tenor_{ref.provider_id}{suffix}",
            size_bytes=written,
        )
