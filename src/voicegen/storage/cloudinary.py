"""Cloudinary audio storage over the REST upload API.

Requests are signed with the account's API secret: the request parameters,
sorted and joined as ``k=v&k=v``, are suffixed with the secret and hashed
with SHA-1.
"""

import hashlib
import logging
import os
import time
from pathlib import Path
from typing import Any

import httpx

from ..audio.segment import AudioSegment
from ..audio.tempfiles import TempWorkspace, unique_name
from ..errors import StorageError
from .sink import ArtifactReference

logger = logging.getLogger(__name__)

API_BASE = "https://api.cloudinary.com/v1_1"

# Cloudinary files audio under the video resource type
RESOURCE_TYPE = "video"


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """Compute the request signature for a set of parameters."""
    payload = "&".join(f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, ""))
    return hashlib.sha1(f"{payload}{api_secret}".encode()).hexdigest()


class CloudinaryClient:
    """Minimal Cloudinary client: upload, destroy and resource lookup."""

    def __init__(
        self,
        cloud_name: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        client: httpx.Client | None = None,
        timeout: float = 60.0,
    ) -> None:
        """Initialize Cloudinary client.

        Args:
            cloud_name: Account cloud name (defaults to CLOUDINARY_CLOUD_NAME env var)
            api_key: API key (defaults to CLOUDINARY_API_KEY env var)
            api_secret: API secret (defaults to CLOUDINARY_API_SECRET env var)
            client: HTTP client
            timeout: Request timeout in seconds
        """
        self._cloud_name = cloud_name or os.getenv("CLOUDINARY_CLOUD_NAME")
        self._api_key = api_key or os.getenv("CLOUDINARY_API_KEY")
        self._api_secret = api_secret or os.getenv("CLOUDINARY_API_SECRET")
        self._client = client or httpx.Client(timeout=timeout)
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        """Check if credentials are present."""
        return bool(self._cloud_name and self._api_key and self._api_secret)

    def _signed(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "timestamp": int(time.time())}
        params["signature"] = sign_params(params, self._api_secret or "")
        params["api_key"] = self._api_key
        return params

    def _post(self, action: str, data: dict[str, Any], files: dict[str, Any] | None = None) -> dict[str, Any]:
        if not self.is_configured:
            raise StorageError("Cloudinary credentials are not configured")

        url = f"{API_BASE}/{self._cloud_name}/{RESOURCE_TYPE}/{action}"
        try:
            response = self._client.post(url, data=data, files=files, timeout=self._timeout)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise StorageError(f"Cloudinary {action} failed: HTTP {e.response.status_code}: {e.response.text[:200]}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise StorageError(f"Cloudinary {action} failed: {e}") from e

    def upload(self, local_path: Path, options: dict[str, Any]) -> dict[str, Any]:
        """Upload a local file.

        Args:
            local_path: File to upload
            options: Upload parameters (folder, public_id, ...)

        Returns:
            Response with at least secure_url, public_id, duration and bytes
        """
        data = self._signed(options)
        try:
            with open(local_path, "rb") as f:
                result = self._post("upload", data, files={"file": (local_path.name, f)})
        except OSError as e:
            raise StorageError(f"Cannot read {local_path}: {e}") from e

        if "secure_url" not in result or "public_id" not in result:
            raise StorageError(f"Cloudinary upload returned an incomplete response: {sorted(result)}")
        return result

    def delete(self, public_id: str) -> dict[str, Any]:
        """Delete an uploaded file. Returns the API response, e.g. {"result": "ok"}."""
        return self._post("destroy", self._signed({"public_id": public_id}))

    def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        """GET on the Admin API, which takes basic auth instead of a signature.

        Returns None when the resource does not exist.
        """
        if not self.is_configured:
            raise StorageError("Cloudinary credentials are not configured")

        url = f"{API_BASE}/{self._cloud_name}/resources/{RESOURCE_TYPE}/upload{path}"
        try:
            response = self._client.get(
                url,
                params=params,
                auth=(self._api_key or "", self._api_secret or ""),
                timeout=self._timeout,
            )
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise StorageError(f"Cloudinary lookup failed: HTTP {e.response.status_code}: {e.response.text[:200]}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise StorageError(f"Cloudinary lookup failed: {e}") from e

    def resource(self, public_id: str) -> dict[str, Any] | None:
        """Look up one uploaded file, or None if it does not exist."""
        return self._get(f"/{public_id}")

    def resources(self, folder: str, max_results: int = 100) -> list[dict[str, Any]]:
        """List uploaded files under a folder."""
        result = self._get("", params={"prefix": f"{folder.rstrip('/')}/", "max_results": max_results})
        return list((result or {}).get("resources", []))


def _to_reference(resource: dict[str, Any]) -> ArtifactReference:
    return ArtifactReference(
        url=resource.get("secure_url", ""),
        public_id=resource["public_id"],
        size_bytes=int(resource.get("bytes", 0)),
        duration_seconds=float(resource.get("duration") or 0.0),
        format=resource.get("format", ""),
    )


class CloudinaryArtifactSink:
    """Uploads finished audio to Cloudinary."""

    def __init__(
        self,
        client: CloudinaryClient | None = None,
        folder: str = "voice-ai-audio",
        temp_dir: Path | str = "temp",
    ) -> None:
        self._client = client or CloudinaryClient()
        self._folder = folder
        self._temp_dir = Path(temp_dir)

    def store(self, segment: AudioSegment, duration_seconds: float = 0.0) -> ArtifactReference:
        """Upload audio.

        Raises:
            StorageError: If the upload fails; local_path holds the retained file
        """
        public_id = unique_name("audio")

        with TempWorkspace(self._temp_dir, "upload") as ws:
            local_path = ws.write(segment.data, segment.format.suffix)
            try:
                result = self._client.upload(
                    local_path,
                    {"folder": self._folder, "public_id": public_id},
                )
            except StorageError as e:
                ws.keep(local_path)
                logger.error(f"Upload failed, audio kept at {local_path}: {e}")
                raise StorageError(str(e), local_path=local_path) from e

        logger.info(f"Uploaded audio to Cloudinary as {result['public_id']}")
        return ArtifactReference(
            url=result["secure_url"],
            public_id=result["public_id"],
            size_bytes=int(result.get("bytes", segment.size_bytes)),
            duration_seconds=float(result.get("duration") or duration_seconds),
            format=result.get("format", segment.format.value),
        )

    def delete(self, public_id: str) -> bool:
        result = self._client.delete(public_id)
        return result.get("result") == "ok"

    def get(self, public_id: str) -> ArtifactReference | None:
        resource = self._client.resource(public_id)
        return _to_reference(resource) if resource else None

    def list_artifacts(self, max_results: int = 100) -> list[ArtifactReference]:
        return [_to_reference(r) for r in self._client.resources(self._folder, max_results) if "public_id" in r]


__all__ = ["CloudinaryArtifactSink", "CloudinaryClient", "sign_params"]
