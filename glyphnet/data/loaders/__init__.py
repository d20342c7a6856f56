"""Built-in synthetic dataset loaders.

Importing this package registers them with :mod:`glyphnet.data.registry`.
"""

from . import synthetic  # noqa: F401

__all__ = ["synthetic"]
