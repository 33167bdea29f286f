# backend/tasks/figma_proxy.py
"""
DocumentSource mot Figma REST API (GET /v1/files/:key).

• Token läses ur serverns env (FIGMA_TOKEN). Inga tokens i query.
• Retries vid nätverksfel, 429 och 5xx med exponentiell backoff + jitter.
• Alla fel blir FigmaApiError(status_code, message); kärnan gör inga egna retries.
"""

from __future__ import annotations

import logging
import os
import random
from time import perf_counter, sleep
from typing import Any, Dict, Optional, Protocol

import requests
from requests.exceptions import RequestException

log = logging.getLogger("figma-static-export/figma-proxy")

# ── Konfiguration via env ───────────────────────────────────────────────────
FIGMA_API_BASE = os.getenv("FIGMA_API_BASE", "https://api.figma.com/v1").rstrip("/")

# Retries
FIGMA_API_ATTEMPTS = int(os.getenv("FIGMA_API_ATTEMPTS", "3"))
FIGMA_API_BACKOFF_S = float(os.getenv("FIGMA_API_BACKOFF_S", "0.3"))    # 0.3 → 0.6 → 1.2 …
FIGMA_API_TIMEOUT_S = float(os.getenv("FIGMA_API_TIMEOUT_S", "30"))


class FigmaApiError(RuntimeError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


class DocumentSource(Protocol):
    def fetch(self, file_key: str) -> Dict[str, Any]: ...


# ── Hjälpare ────────────────────────────────────────────────────────────────
def _should_retry_status(status: int) -> bool:
    return status == 429 or (500 <= status < 600)

def _sleep_backoff(base: float, attempt: int) -> None:
    t = base * (2 ** (attempt - 1))
    jitter = t * 0.25 * (random.random() - 0.5)  # ±12.5%
    sleep(max(0.0, t + jitter))

def _get_with_retries(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, str]] = None,
    timeout: float = 30.0,
    attempts: int = 3,
    backoff_s: float = 0.3,
) -> requests.Response:
    last_exc: Optional[RequestException] = None
    r: Optional[requests.Response] = None
    for i in range(1, max(1, attempts) + 1):
        try:
            r = requests.get(url, headers=headers, params=params, timeout=timeout)
            if _should_retry_status(r.status_code) and i < attempts:
                log.info("Figma API retry", extra={"status": r.status_code, "attempt": i})
                _sleep_backoff(backoff_s, i)
                continue
            return r
        except RequestException as e:
            last_exc = e
            if i < attempts:
                log.info("Figma API network error, retrying", extra={"attempt": i, "err": str(e)})
                _sleep_backoff(backoff_s, i)
                continue
            break
    if last_exc is not None:
        raise last_exc
    return r  # type: ignore[return-value]


# ── Publik källa ────────────────────────────────────────────────────────────
class FigmaDocumentSource:
    """Hämtar hela fil-JSON för en filnyckel."""

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        base_url: str = FIGMA_API_BASE,
        attempts: int = FIGMA_API_ATTEMPTS,
        backoff_s: float = FIGMA_API_BACKOFF_S,
        timeout: float = FIGMA_API_TIMEOUT_S,
    ) -> None:
        self.token = token if token is not None else os.getenv("FIGMA_TOKEN")
        self.base_url = base_url.rstrip("/")
        self.attempts = attempts
        self.backoff_s = backoff_s
        self.timeout = timeout

    def _auth_headers(self) -> Dict[str, str]:
        if not self.token:
            raise FigmaApiError(
                401,
                "FIGMA_TOKEN environment variable is not set. Get a personal access token from Figma.",
            )
        return {"X-Figma-Token": self.token}

    def fetch(self, file_key: str) -> Dict[str, Any]:
        url = f"{self.base_url}/files/{file_key}"
        headers = self._auth_headers()

        t0 = perf_counter()
        try:
            r = _get_with_retries(
                url,
                headers=headers,
                timeout=self.timeout,
                attempts=self.attempts,
                backoff_s=self.backoff_s,
            )
        except RequestException as e:
            log.error("Files API network error", exc_info=True)
            raise FigmaApiError(502, f"Kunde inte nå Figma-API: {e}") from e
        dt = (perf_counter() - t0) * 1000
        log.info("Files API response", extra={"file_key": file_key, "status": r.status_code, "ms": round(dt, 1)})

        if r.status_code != 200:
            raise FigmaApiError(r.status_code, f"Figma API error {r.status_code}: {r.text[:300]}")

        try:
            data = r.json()
        except ValueError as e:
            raise FigmaApiError(502, "Figma API svarade inte med giltig JSON") from e
        if not isinstance(data, dict):
            raise FigmaApiError(502, "Figma API svarade med oväntad JSON-typ")
        return data


__all__ = ["FigmaApiError", "DocumentSource", "FigmaDocumentSource"]
