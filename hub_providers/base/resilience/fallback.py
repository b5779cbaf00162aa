"""Ranked, retrying, failing-over multi-provider chat.

Purpose
-------
``chat_with_fallback`` walks the active models in ascending priority (an
optional preferred record goes first), retries
each candidate with linear backoff and moves to the next candidate once its
retry budget is exhausted. The first model that completes a stream ends the
whole orchestration; every chunk it yields is tagged with its display name.

Failure semantics
-----------------
- No active model: :class:`NoActiveModelError` before any network call.
- Unknown provider or missing key: the candidate is skipped without using a
  retry attempt and the reason is recorded.
- Adapter exceptions: retried up to ``max_retries`` times, then recorded.
- A candidate that already yielded output and then fails is not retried and
  no further candidate runs; the consolidated error is raised immediately.
- :class:`CancelledError` propagates at once and is never retried.
- Exhaustion: :class:`AllModelsFailedError` listing each candidate.

The orchestrator is stateless between invocations.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Iterable, List, Mapping, Optional

from ..cancellation import CancelledError
from ..errors import AllModelsFailedError, ModelFailure, NoActiveModelError, classify_exception, is_retryable
from ..interfaces import ProviderStrategy
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import ChatMessage, ChatOptions, ModelRecord, StreamChunk, rank_active

PROVIDER_NOT_FOUND = "Provider not found"
API_KEY_NOT_CONFIGURED = "API key not configured"
UNKNOWN_ERROR = "Unknown error"

_logger = get_logger("fallback")


@dataclass(frozen=True)
class FallbackConfig:
    """Retry and failover policy.

    Attributes:
        max_retries: Extra attempts per model after the first one.
        retry_delay_ms: Base delay; retry ``n`` waits ``retry_delay_ms * n``.
        enable_fallback: When False only the first attempted model runs.
    """

    max_retries: int = 2
    retry_delay_ms: int = 1000
    enable_fallback: bool = True

    def delays(self) -> Iterable[float]:
        """Yield the wait (seconds) before each retry, in attempt order."""
        for attempt in range(1, self.max_retries + 1):
            yield self.retry_delay_ms * attempt / 1000.0

    def to_dict(self) -> dict:
        return {
            "max_retries": self.max_retries,
            "retry_delay_ms": self.retry_delay_ms,
            "enable_fallback": self.enable_fallback,
        }


DEFAULT_FALLBACK_CONFIG = FallbackConfig()


def _error_text(exc: BaseException) -> str:
    return str(exc) or UNKNOWN_ERROR


async def chat_with_fallback(
    models: Iterable[ModelRecord],
    providers: Mapping[str, ProviderStrategy],
    get_api_key: Callable[[str], str],
    messages: List[ChatMessage],
    options: Optional[ChatOptions] = None,
    config: FallbackConfig = DEFAULT_FALLBACK_CONFIG,
    *,
    preferred_id: Optional[str] = None,
) -> AsyncIterator[StreamChunk]:
    """Stream the answer of the first model that succeeds.

    Parameters
    ----------
    models:
        Full model list; inactive records are filtered out here.
    providers:
        Provider name -> adapter mapping.
    get_api_key:
        Returns the plaintext key for a provider, ``""`` when none is stored.
    messages, options:
        Unified request forwarded unchanged to the adapter.
    config:
        Retry and failover policy.
    preferred_id:
        Record id tried first when it is active; the remaining candidates
        keep priority order.
    """
    options = options or ChatOptions()
    ranked = rank_active(models)
    preferred = next((m for m in ranked if m.id == preferred_id), None) if preferred_id else None
    if preferred is not None:
        ranked = [preferred] + [m for m in ranked if m is not preferred]
    if not ranked:
        raise NoActiveModelError()

    failures: List[ModelFailure] = []
    delays = list(config.delays())

    for model in ranked:
        ctx = LogContext(provider=model.provider_name, model=model.model_id, operation="chat")
        strategy = providers.get(model.provider_name)
        if strategy is None:
            failures.append(ModelFailure(model.display_name, PROVIDER_NOT_FOUND))
            normalized_log_event(_logger, "fallback.skip", ctx, phase="resolve", reason=PROVIDER_NOT_FOUND)
            continue
        api_key = get_api_key(model.provider_name)
        if not api_key:
            failures.append(ModelFailure(model.display_name, API_KEY_NOT_CONFIGURED))
            normalized_log_event(_logger, "fallback.skip", ctx, phase="resolve", reason=API_KEY_NOT_CONFIGURED)
            continue

        for attempt in range(config.max_retries + 1):
            options.raise_if_cancelled()
            if attempt > 0:
                await asyncio.sleep(delays[attempt - 1])
            normalized_log_event(_logger, "fallback.attempt", ctx, phase="start", attempt=attempt + 1)
            produced = False
            try:
                async with aclosing(strategy.chat(model, messages, api_key, options)) as stream:
                    async for chunk in stream:
                        produced = True
                        yield chunk.with_model(model.display_name)
            except CancelledError as exc:
                normalized_log_event(
                    _logger, "fallback.cancelled", ctx, phase="stream", attempt=attempt + 1, reason=exc.reason
                )
                raise
            except Exception as exc:  # noqa: BLE001 - every adapter failure is recorded per attempt
                code = classify_exception(exc).value
                normalized_log_event(
                    _logger,
                    "fallback.attempt_failed",
                    ctx,
                    phase="stream",
                    attempt=attempt + 1,
                    error_code=code,
                    level=logging.WARNING,
                    error=_error_text(exc),
                    retryable=is_retryable(exc),
                )
                if produced:
                    failures.append(ModelFailure(model.display_name, _error_text(exc)))
                    raise AllModelsFailedError(failures) from exc
                if attempt == config.max_retries:
                    failures.append(ModelFailure(model.display_name, _error_text(exc)))
                continue
            normalized_log_event(_logger, "fallback.success", ctx, phase="finalize", attempt=attempt + 1)
            return

        if not config.enable_fallback:
            break

    normalized_log_event(
        _logger,
        "fallback.exhausted",
        phase="finalize",
        level=logging.ERROR,
        failures=[f.model for f in failures],
    )
    raise AllModelsFailedError(failures)


__all__ = [
    "FallbackConfig",
    "DEFAULT_FALLBACK_CONFIG",
    "PROVIDER_NOT_FOUND",
    "API_KEY_NOT_CONFIGURED",
    "chat_with_fallback",
]
