"""CLI parser construction for hub-providers.

This module wires subparsers but contains no execution logic. Subcommand
handlers live in ``cli_actions``.
"""

from __future__ import annotations

import argparse


def _add_models_parser(sub: argparse._SubParsersAction) -> None:
    p_models = sub.add_parser("models", help="Inspect and edit the configured model catalog")
    msub = p_models.add_subparsers(dest="models_cmd", required=True)

    msub.add_parser("list", help="List configured models in priority order")

    p_add = msub.add_parser("add", help="Add a model")
    p_add.add_argument("--provider", required=True)
    p_add.add_argument("--model-id", required=True)
    p_add.add_argument("--name", default=None, help="Display name (defaults to the model id)")
    p_add.add_argument("--description", default=None)
    p_add.add_argument("--priority", type=int, default=None)
    p_add.add_argument("--default", action="store_true", help="Make this the default model")
    p_add.add_argument("--inactive", action="store_true", help="Add without enabling it")
    p_add.add_argument("--vision", action="store_true")
    p_add.add_argument("--tools", action="store_true")
    p_add.add_argument("--reasoning", action="store_true")

    for cmd, text in (
        ("remove", "Delete a model"),
        ("default", "Make a model the default"),
        ("activate", "Enable a model for fallback"),
        ("deactivate", "Exclude a model from fallback"),
        ("select", "Remember a model as the active selection"),
    ):
        p = msub.add_parser(cmd, help=text)
        p.add_argument("id")

    p_reorder = msub.add_parser("reorder", help="Rewrite priorities in the given order")
    p_reorder.add_argument("ids", nargs="+")

    msub.add_parser("reset", help="Restore the built-in catalog and fallback policy")


def _add_keys_parser(sub: argparse._SubParsersAction) -> None:
    p_keys = sub.add_parser("keys", help="Manage stored provider API keys")
    ksub = p_keys.add_subparsers(dest="keys_cmd", required=True)
    p_set = ksub.add_parser("set", help="Encrypt and store a key")
    p_set.add_argument("provider")
    p_set.add_argument("api_key")
    p_rm = ksub.add_parser("remove", help="Forget a key")
    p_rm.add_argument("provider")
    ksub.add_parser("list", help="Show masked keys")


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level CLI parser and subcommands.

    Performs no side effects and no I/O.
    """
    p = argparse.ArgumentParser(prog="hub-providers", description="Multi-provider LLM chat core")
    p.add_argument("--config", default=None, help="JSON or YAML settings file")
    p.add_argument("--db", default=None, help="SQLite database path")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("providers", help="Show provider status (key, models, last test)")
    _add_models_parser(sub)
    _add_keys_parser(sub)

    p_test = sub.add_parser("test", help="Test connectivity to a provider")
    p_test.add_argument("provider")
    p_test.add_argument("--api-key", default=None, help="Test this key instead of the stored one")

    p_discover = sub.add_parser("discover", help="List models advertised by a provider")
    p_discover.add_argument("provider")

    p_fallback = sub.add_parser("fallback", help="Show or change the retry and failover policy")
    p_fallback.add_argument("--max-retries", type=int, default=None)
    p_fallback.add_argument("--retry-delay-ms", type=int, default=None)
    grp = p_fallback.add_mutually_exclusive_group()
    grp.add_argument("--enable", dest="enable_fallback", action="store_true", default=None)
    grp.add_argument("--disable", dest="enable_fallback", action="store_false")

    p_chat = sub.add_parser("chat", help="Stream one prompt through the fallback chain")
    p_chat.add_argument("prompt")
    p_chat.add_argument("--system", default=None)
    p_chat.add_argument("--max-tokens", type=int, default=None)
    p_chat.add_argument("--temperature", type=float, default=None)
    p_chat.add_argument("--web-search", action="store_true")
    p_chat.add_argument("--reasoning", action="store_true", help="Print the reasoning channel too")

    return p


__all__ = ["build_parser"]
