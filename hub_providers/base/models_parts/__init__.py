"""Data model parts; import from ``hub_providers.base.models``."""
