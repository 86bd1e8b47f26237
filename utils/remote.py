import json
import logging
from typing import Any, Dict, Optional

import httpx

from config import load_config
from models import AppState
from utils.merge import LOAD_REQUEST, build_save_payload

logger = logging.getLogger(__name__)

# Apps Script web apps reject preflighted requests, so bodies go out as text/plain.
REQUEST_HEADERS = {"Content-Type": "text/plain;charset=utf-8"}


class RemoteClient:
    """Thin transport to the remote backup store. Failures come back as error responses."""

    def __init__(self, url: str, timeout: Optional[float] = None, transport: Optional[httpx.BaseTransport] = None):
        if timeout is None:
            timeout = load_config().get("remote", {}).get("timeout", 20)
        self.url = url
        self.client = httpx.Client(timeout=timeout, follow_redirects=True, transport=transport)

    def close(self) -> None:
        self.client.close()

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.client.post(
                self.url,
                content=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
                headers=REQUEST_HEADERS,
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            logger.warning("Remote %s failed: %s", payload.get("action"), e)
            return {"status": "error", "message": str(e), "data": None}
        except ValueError as e:
            logger.warning("Remote %s returned non-JSON: %s", payload.get("action"), e)
            return {"status": "error", "message": "Remote reply is not JSON", "data": None}
        if not isinstance(body, dict):
            return {"status": "error", "message": "Remote reply is not an object", "data": None}
        return body

    def save(self, state: AppState) -> Dict[str, Any]:
        return self._post(build_save_payload(state))

    def load(self) -> Dict[str, Any]:
        return self._post(LOAD_REQUEST)


def resolve_remote_url(state: AppState) -> str:
    """Locally stored endpoint first, then the configured one."""
    if state.settings.gas_url:
        return state.settings.gas_url
    return load_config().get("remote", {}).get("url", "") or ""
