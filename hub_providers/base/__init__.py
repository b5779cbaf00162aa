"""Provider-agnostic contracts and shared infrastructure.

Import from the submodules (``base.models``, ``base.errors``,
``base.interfaces`` ...); this package intentionally re-exports nothing so
importing one submodule never drags in the others.
"""
