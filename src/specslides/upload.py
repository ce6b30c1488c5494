from __future__ import annotations

from typing import Any

import httpx

from .errors import UploadError
from .logging import get_logger
from .model import ExtractResult
from .render import derive_title

logger = get_logger(__name__)

STORIES_PATH = "/api/stories"


def build_story_payload(result: ExtractResult) -> dict[str, Any]:
    extract = result.extract
    return {
        "story": {
            "title": derive_title(extract.prompts),
            "markdown": result.markdown,
            "source": extract.source,
            "source_path": extract.session.source_path,
        }
    }


def _format_details(details: Any) -> str:
    if isinstance(details, str):
        return details.strip()
    if isinstance(details, list):
        return ", ".join(str(item) for item in details if item)
    return ""


def _failure_message(payload: dict[str, Any]) -> str:
    error = payload.get("error")
    msg = error if isinstance(error, str) and error else "upload_failed"
    details = _format_details(payload.get("details"))
    if details:
        msg = f"{msg}: {details}"
    return msg


class StoryClient:
    def __init__(
        self,
        server_url: str,
        timeout_s: float = 30,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not server_url.strip():
            raise ValueError("Specslides server URL is empty")
        self._url = server_url.strip().rstrip("/") + STORIES_PATH
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._owns_client = client is None

    @property
    def url(self) -> str:
        return self._url

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def upload(self, result: ExtractResult) -> str:
        payload = build_story_payload(result)
        logger.debug("upload.request", url=self._url, bytes=len(result.markdown))
        try:
            resp = await self._client.post(self._url, json=payload)
        except httpx.HTTPError as e:
            logger.error(
                "upload.network_error",
                url=self._url,
                error=str(e),
                error_type=e.__class__.__name__,
            )
            raise UploadError(f"upload failed: {e}") from e

        try:
            body = resp.json()
        except ValueError as e:
            raise UploadError(f"decode upload response: {e}") from e
        if not isinstance(body, dict):
            raise UploadError("decode upload response: expected a JSON object")

        if not resp.is_success:
            msg = _failure_message(body)
            logger.error(
                "upload.failed", url=self._url, status=resp.status_code, error=msg
            )
            raise UploadError(f"upload failed: {msg}")

        story_url = body.get("url")
        if not isinstance(story_url, str) or not story_url:
            raise UploadError("upload failed: missing URL in response")

        logger.debug("upload.completed", url=story_url, status=resp.status_code)
        return story_url


async def upload_story(
    server_url: str,
    result: ExtractResult,
    *,
    timeout_s: float = 30,
    client: httpx.AsyncClient | None = None,
) -> str:
    story_client = StoryClient(server_url, timeout_s=timeout_s, client=client)
    try:
        return await story_client.upload(result)
    finally:
        await story_client.close()
