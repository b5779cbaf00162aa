"""Interface parts; import from ``hub_providers.base.interfaces``."""
