"""CLI action handlers.

Purpose
-------
Subcommand handlers for the hub-providers CLI. Every handler receives the
parsed arguments and a :class:`~hub_providers.service.model_manager.ModelManager`
and returns a process exit code. Results are printed as JSON on stdout;
errors are printed as JSON on stderr.

Exit codes
----------
- ``0`` success
- ``1`` runtime failure (provider error, every model failed)
- ``2`` invalid input (unknown id or provider, validation error)

This module has no top-level side effects and is safe to import in tests.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from typing import Any, Awaitable, Callable, Dict, Union

from pydantic import ValidationError

from ...base.errors import AllModelsFailedError, ConfigurationError, ProviderError
from ...base.logging import LogContext, get_logger, normalized_log_event
from ...base.models import ChatOptions
from ..model_manager import ModelManager

Handler = Callable[[argparse.Namespace, ModelManager], Union[int, Awaitable[int]]]

_logger = get_logger("cli")


def _emit(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _error(message: str, code: int = 2, **extra: Any) -> int:
    print(json.dumps({"error": message, **extra}), file=sys.stderr)
    return code


# ---- providers / keys ----
def handle_providers(args: argparse.Namespace, manager: ModelManager) -> int:
    _emit([asdict(s) for s in manager.provider_statuses()])
    return 0


def handle_keys(args: argparse.Namespace, manager: ModelManager) -> int:
    if args.keys_cmd == "set":
        if manager.get_strategy(args.provider) is None:
            return _error(f"unknown provider '{args.provider}'")
        manager.configure_api_key(args.provider, args.api_key)
        _emit({"provider": args.provider, "key": manager.masked_api_key(args.provider)})
        return 0
    if args.keys_cmd == "remove":
        removed = manager.remove_api_key(args.provider)
        _emit({"provider": args.provider, "removed": removed})
        return 0
    _emit({p.name: manager.masked_api_key(p.name) for p in manager.list_providers()})
    return 0


# ---- models ----
def _models_add(args: argparse.Namespace, manager: ModelManager) -> int:
    capabilities = {
        "supports_vision": args.vision or None,
        "supports_tools": args.tools or None,
        "supports_reasoning": args.reasoning or None,
    }
    record = manager.add_model(
        provider_name=args.provider,
        model_id=args.model_id,
        display_name=args.name,
        description=args.description,
        priority=args.priority,
        is_active=not args.inactive,
        is_default=args.default,
        capabilities={k: v for k, v in capabilities.items() if v is not None},
    )
    _emit(record.to_dict())
    return 0


def _toggle(result: bool, record_id: str, manager: ModelManager) -> int:
    if not result:
        return _error(f"unknown model id '{record_id}'")
    _emit(manager.registry.get(record_id).to_dict())
    return 0


def handle_models(args: argparse.Namespace, manager: ModelManager) -> int:
    """Dispatch ``models <sub>``; validation and registry errors exit with ``2``."""
    cmd = args.models_cmd
    try:
        if cmd == "list":
            _emit([r.to_dict() for r in sorted(manager.list_models(), key=lambda r: r.priority)])
            return 0
        if cmd == "add":
            return _models_add(args, manager)
        if cmd == "remove":
            if not manager.remove_model(args.id):
                return _error(f"unknown model id '{args.id}'")
            _emit({"id": args.id, "removed": True})
            return 0
        if cmd == "default":
            return _toggle(manager.set_default_model(args.id), args.id, manager)
        if cmd == "activate":
            return _toggle(manager.set_model_active(args.id, True), args.id, manager)
        if cmd == "deactivate":
            return _toggle(manager.set_model_active(args.id, False), args.id, manager)
        if cmd == "select":
            _emit(manager.select_active_model(args.id).to_dict())
            return 0
        if cmd == "reorder":
            _emit([r.to_dict() for r in manager.reorder_models(args.ids)])
            return 0
        if cmd == "reset":
            _emit([r.to_dict() for r in manager.reset_to_defaults()])
            return 0
    except ValidationError as exc:
        return _error("invalid model", details=[e["msg"] for e in exc.errors()])
    except ConfigurationError as exc:
        return _error(exc.message, code_name=exc.code.value)
    return _error(f"unknown models command '{cmd}'")


def handle_fallback(args: argparse.Namespace, manager: ModelManager) -> int:
    changes: Dict[str, Any] = {
        "max_retries": args.max_retries,
        "retry_delay_ms": args.retry_delay_ms,
        "enable_fallback": args.enable_fallback,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    try:
        config = manager.set_fallback_config(**changes) if changes else manager.get_fallback_config()
    except ValidationError as exc:
        return _error("invalid fallback policy", details=[e["msg"] for e in exc.errors()])
    _emit(config.to_dict())
    return 0


# ---- network ----
async def handle_test(args: argparse.Namespace, manager: ModelManager) -> int:
    result = await manager.test_connection(args.provider, args.api_key)
    _emit(result.to_dict())
    return 0 if result.success else 1


async def handle_discover(args: argparse.Namespace, manager: ModelManager) -> int:
    try:
        models = await manager.list_available_models(args.provider)
    except ConfigurationError as exc:
        return _error(exc.message, code_name=exc.code.value)
    except ProviderError as exc:
        return _error(exc.message, code=1, code_name=exc.code.value)
    _emit([asdict(m) for m in models])
    return 0


async def handle_chat(args: argparse.Namespace, manager: ModelManager) -> int:
    """Stream the reply to stdout, printing only the new suffix of each cumulative chunk."""
    options = ChatOptions(
        system_instruction=args.system,
        max_tokens=args.max_tokens,
        temperature=args.temperature,
        web_search=args.web_search,
    )
    ctx = LogContext(operation="cli.chat")
    normalized_log_event(_logger, "cli.start", ctx, phase="start")
    printed, model_used, sources = 0, None, None
    try:
        async for chunk in manager.chat([{"role": "user", "content": args.prompt}], options):
            model_used = chunk.model_used or model_used
            sources = chunk.sources or sources
            if len(chunk.text) > printed:
                sys.stdout.write(chunk.text[printed:])
                sys.stdout.flush()
                printed = len(chunk.text)
            if chunk.is_complete and args.reasoning and chunk.reasoning:
                sys.stdout.write(f"\n\n[reasoning]\n{chunk.reasoning}")
    except ValidationError as exc:
        return _error("invalid message", details=[e["msg"] for e in exc.errors()])
    except ConfigurationError as exc:
        return _error(exc.message, code_name=exc.code.value)
    except AllModelsFailedError as exc:
        normalized_log_event(_logger, "cli.error", ctx, phase="finalize", error_code="all_models_failed")
        return _error(str(exc), code=1, failures=[asdict(f) for f in exc.failures])
    sys.stdout.write("\n")
    for source in sources or []:
        sys.stdout.write(f"- {source.title}: {source.uri}\n")
    if model_used:
        sys.stdout.write(f"[{model_used}]\n")
    normalized_log_event(_logger, "cli.finalize", ctx, phase="finalize", model=model_used, chars=printed)
    return 0


HANDLERS: Dict[str, Handler] = {
    "providers": handle_providers,
    "keys": handle_keys,
    "models": handle_models,
    "fallback": handle_fallback,
    "test": handle_test,
    "discover": handle_discover,
    "chat": handle_chat,
}


__all__ = [
    "HANDLERS",
    "handle_chat",
    "handle_discover",
    "handle_fallback",
    "handle_keys",
    "handle_models",
    "handle_providers",
    "handle_test",
]
