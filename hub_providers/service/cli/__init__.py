"""hub-providers CLI (package entrypoint).

Wires argument parsing to the handlers in ``cli_actions``. It performs no
provider logic directly.

Public API re-exports:
- ``main``: CLI entrypoint callable
- ``build_parser``: parser factory used by tests
"""

from __future__ import annotations

import asyncio
import inspect
import sys
from typing import Optional

from ...config import get_settings
from ...di import ProvidersContainer, build_container
from .cli_actions import HANDLERS
from .cli_parser import build_parser


async def _dispatch(args, container: ProvidersContainer, *, close: bool) -> int:
    try:
        result = HANDLERS[args.cmd](args, container.manager())
        if inspect.isawaitable(result):
            result = await result
        return result
    finally:
        if close:
            await container.aclose()


def main(argv: Optional[list[str]] = None, *, container: Optional[ProvidersContainer] = None) -> int:
    """CLI entrypoint.

    Parameters
    ----------
    argv: Optional[list[str]]
        Argument vector; when ``None`` uses ``sys.argv[1:]``.
    container: Optional[ProvidersContainer]
        Pre-built container (tests inject one over an in-memory store). The
        caller keeps ownership; only a container built here is closed.

    Returns
    -------
    int
        Process exit code (0 success, non-zero on error).
    """
    args = build_parser().parse_args(list(sys.argv[1:] if argv is None else argv))
    owned = container is None
    if container is None:
        overrides = {"db_path": args.db} if args.db else None
        container = build_container(get_settings(overrides, config_file=args.config))
    return asyncio.run(_dispatch(args, container, close=owned))


__all__ = ["main", "build_parser"]


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
