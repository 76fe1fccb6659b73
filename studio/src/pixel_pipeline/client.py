from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from .config import EngineConfig
from .errors import ImageLoadError
from .models import EditMode, EditResult

logger = logging.getLogger(__name__)

_EDIT_ENDPOINTS = {
    EditMode.REMOVE: "/ai-remove",
    EditMode.EDIT: "/gemini-editor",
}


class StudioApiError(RuntimeError):
    def __init__(self, message: str, status: int, requires_credits: bool = False):
        super().__init__(message)
        self.status = status
        self.requires_credits = requires_credits


class StudioClient:
    """HTTP side of the two external contracts: fetch image bytes, submit an edit.

    Authentication is the caller's business; pass whatever headers the backend
    needs and they are sent with every request.
    """

    def __init__(
        self,
        config: EngineConfig,
        headers: Mapping[str, str] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        if headers:
            self.session.headers.update(headers)

    def fetch_image_bytes(self, url: str) -> bytes:
        try:
            response = self.session.get(url, timeout=self.config.request_timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ImageLoadError(f"failed to fetch image {url}: {exc}") from exc
        return response.content

    def submit_edit(
        self,
        image_bytes: bytes,
        mask_bytes: bytes,
        mode: EditMode | str,
        prompt: str,
        project_id: str,
        parent_id: str,
    ) -> EditResult:
        mode = EditMode(mode)
        files = {
            "image": ("image.png", image_bytes, "image/png"),
            "mask": ("mask.png", mask_bytes, "image/png"),
        }
        data = {"projectId": project_id, "parentId": parent_id}
        if mode is EditMode.EDIT:
            data["prompt"] = prompt

        payload = self._upload(_EDIT_ENDPOINTS[mode], files=files, data=data)
        try:
            return EditResult(
                id=str(payload["id"]), url=str(payload["url"]), type=payload.get("type")
            )
        except (KeyError, TypeError) as exc:
            raise StudioApiError(f"malformed edit response: {payload!r}", 502) from exc

    def _upload(
        self, path: str, files: dict[str, Any], data: dict[str, str]
    ) -> dict[str, Any]:
        if not self.config.api_url:
            raise StudioApiError("API URL not configured", 0)

        url = f"{self.config.api_url.rstrip('/')}/studio{path}"
        logger.debug("POST %s", url)
        try:
            response = self.session.post(
                url, files=files, data=data, timeout=self.config.upload_timeout
            )
        except requests.Timeout as exc:
            raise StudioApiError(
                "Request timed out. The operation is taking too long, please try again.",
                408,
            ) from exc
        except requests.RequestException as exc:
            raise StudioApiError(str(exc) or "Network error", 0) from exc

        if not response.ok:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"error": "Upload failed"}
            if not isinstance(error_data, dict):
                error_data = {}
            raise StudioApiError(
                error_data.get("error") or f"API error: {response.status_code}",
                response.status_code,
                bool(error_data.get("requiresCredits", False)),
            )

        try:
            return response.json()
        except ValueError as exc:
            raise StudioApiError("response was not valid JSON", response.status_code) from exc


