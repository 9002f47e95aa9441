"""Async client for the vendor portal HTTP API."""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError
from urllib.request import Request, urlopen

logger = logging.getLogger(__name__)

GET_APPLICATIONS_PATH = "/api/getApplications"
SUBMIT_APPLICATION_PATH = "/api/submitCraftApplication"
USER_AGENT = "Vendor-Portal-Client/0.1"


@dataclass
class ApiResponse:
    status: int
    body: bytes

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


class PortalApiClient:
    def __init__(self, base_url: str, user_id: str | None = None, timeout: float = 20.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._user_id = user_id
        self._timeout = timeout

    async def get_applications(self) -> ApiResponse:
        return await asyncio.to_thread(self._send, "GET", GET_APPLICATIONS_PATH, None)

    async def submit_craft_application(self, payload: dict[str, Any]) -> ApiResponse:
        body = json.dumps(payload).encode("utf-8")
        return await asyncio.to_thread(self._send, "POST", SUBMIT_APPLICATION_PATH, body)

    def _headers(self, has_body: bool) -> dict[str, str]:
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if has_body:
            headers["Content-Type"] = "application/json"
        if self._user_id:
            headers["X-User-Id"] = self._user_id
        return headers

    def _send(self, method: str, path: str, body: bytes | None) -> ApiResponse:
        request = Request(
            f"{self._base_url}{path}",
            data=body,
            method=method,
            headers=self._headers(body is not None),
        )
        try:
            with urlopen(request, timeout=self._timeout) as response:  # noqa: S310
                return ApiResponse(status=response.status, body=response.read())
        except HTTPError as err:
            logger.debug("%s %s returned status %s", method, path, err.code)
            return ApiResponse(status=err.code, body=err.read() or b"")
