"""HTTP helpers shared by the REST-based adapters."""

from .client import build_async_client

__all__ = ["build_async_client"]
