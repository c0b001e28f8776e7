from __future__ import annotations

import random
import time
from typing import Mapping, Optional, Sequence

import requests

TRANSIENT_EXCEPTIONS = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
)


def _compute_sleep_seconds(
    attempt: int,
    *,
    backoff_base: float,
    backoff_max: float,
) -> float:
    # Exponential backoff with jitter
    base = backoff_base * (2 ** max(0, attempt - 1))
    jitter = random.uniform(0, backoff_base)
    return min(backoff_max, base + jitter)


def _retry_after_seconds(resp: requests.Response) -> Optional[float]:
    value = resp.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def http_get_with_retries(
    url: str,
    *,
    params: Optional[Mapping[str, str | int]] = None,
    headers: Optional[Mapping[str, str]] = None,
    timeout: int = 60,
    max_attempts: int = 4,
    backoff_base: float = 0.5,
    backoff_max: float = 8.0,
    status_forcelist: Sequence[int] = (429, 500, 502, 503, 504),
) -> requests.Response:
    """
    GET `url`, retrying transient failures.

    Retries on connection/timeout errors and on HTTP statuses in
    `status_forcelist`, with exponential backoff plus jitter (a
    `Retry-After` header takes precedence). The last response is returned
    as-is; callers still call raise_for_status(). When every attempt
    fails with a transient exception, that exception is re-raised.
    """
    last_exc: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            resp = requests.get(url, params=params, headers=headers, timeout=timeout)
        except TRANSIENT_EXCEPTIONS as exc:
            last_exc = exc
            print(f"[retry] GET {url} failed (attempt {attempt}/{max_attempts}): {exc}")
            if attempt < max_attempts:
                time.sleep(
                    _compute_sleep_seconds(attempt, backoff_base=backoff_base, backoff_max=backoff_max)
                )
            continue

        if resp.status_code in status_forcelist and attempt < max_attempts:
            sleep_sec = _retry_after_seconds(resp)
            if sleep_sec is None:
                sleep_sec = _compute_sleep_seconds(
                    attempt, backoff_base=backoff_base, backoff_max=backoff_max
                )
            print(f"[retry] GET {url} returned {resp.status_code}; retrying in {sleep_sec:.1f}s")
            time.sleep(sleep_sec)
            continue
        return resp

    assert last_exc is not None
    raise last_exc


__all__ = ["http_get_with_retries"]
