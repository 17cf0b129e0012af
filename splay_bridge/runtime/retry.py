from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Tuple, TypeVar

from splay_bridge.runtime.errors import NON_RETRYABLE

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def run_with_retry(
    *,
    call: Callable[[], Awaitable[T]],
    classify_error: Callable[[Exception], str],
    retry_cfg: Dict[str, Any],
) -> Tuple[T, int]:
    """Run ``call`` until it succeeds or its failure is not retryable.

    Returns ``(result, attempts)``. The last failure is re-raised unchanged.
    """
    max_attempts = max(1, int(retry_cfg.get("max_attempts", 1)))
    backoff_ms = list(retry_cfg.get("backoff_ms", []))
    retry_on = set(retry_cfg.get("retry_on", []))
    attempts = 0

    while True:
        attempts += 1
        try:
            out = await call()
            return out, attempts
        except Exception as exc:
            err_class = classify_error(exc)
            if err_class in NON_RETRYABLE or err_class not in retry_on or attempts >= max_attempts:
                raise

            delay = 0.25
            if backoff_ms:
                idx = min(attempts - 1, len(backoff_ms) - 1)
                delay = backoff_ms[idx] / 1000.0
            logger.warning("attempt %d/%d failed (%s: %s), retrying in %.3fs", attempts, max_attempts, err_class, exc, delay)
            await asyncio.sleep(delay)
