from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import requests


log = logging.getLogger(__name__)


class RateLimiter:
    """
    Enforce a minimum gap between consecutive provider calls.
    """

    def __init__(self, min_interval: float) -> None:
        self.min_interval = max(0.0, float(min_interval))
        self._last_ts = 0.0

    @classmethod
    def from_delay_ms(cls, delay_ms: int) -> "RateLimiter":
        return cls(min_interval=delay_ms / 1000.0)

    def wait(self) -> None:
        if self.min_interval <= 0:
            return
        now = time.monotonic()
        sleep_for = self.min_interval - (now - self._last_ts)
        if sleep_for > 0:
            time.sleep(sleep_for)
        self._last_ts = time.monotonic()


class ApiFootballError(Exception):
    pass


class SeasonNotFoundError(ApiFootballError):
    pass


def _has_upstream_errors(errors: Any) -> bool:
    if isinstance(errors, dict):
        return any(bool(value) for value in errors.values())
    return bool(errors)


class ApiFootballClient:
    """
    Thin API-Football v3 client: static key header, rate limiting, no retries.
    Every failure (network, non-2xx, bad JSON, provider ``errors``) becomes ApiFootballError.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://v3.football.api-sports.io",
        timeout: int = 30,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        if not api_key:
            raise ApiFootballError("API_FOOTBALL_KEY is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/json",
                "x-apisports-key": api_key,
            }
        )
        self.rate_limiter = rate_limiter or RateLimiter(0)

    def get(self, path: str, params: Optional[Dict[str, object]] = None) -> Dict:
        url = f"{self.base_url}/{path.lstrip('/')}"
        self.rate_limiter.wait()
        log.debug("GET %s params=%s", url, params)
        try:
            response = self.session.get(url, params=params or {}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ApiFootballError(f"API-Football request to {path} failed: {exc}") from exc
        if not response.ok:
            raise ApiFootballError(
                f"API-Football request failed ({response.status_code}): {response.text[:300]}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiFootballError(f"Invalid JSON in response for {url}") from exc
        if not isinstance(payload, dict):
            raise ApiFootballError(f"Unexpected payload type for {url}: {type(payload).__name__}")
        errors = payload.get("errors")
        if _has_upstream_errors(errors):
            raise ApiFootballError(f"API-Football returned errors for {path}: {errors}")
        return payload

    def get_response(self, path: str, params: Optional[Dict[str, object]] = None) -> List[Any]:
        """
        GET and return the ``response`` array; anything else is a malformed body.
        """
        payload = self.get(path, params=params)
        items = payload.get("response")
        if items is None:
            return []
        if not isinstance(items, list):
            raise ApiFootballError(f"Malformed 'response' for {path}: expected a list")
        return items
