"""
tessera - configuration bundle composer

tessera composes independently authored configuration bundles (a primary
document plus agents, commands, hooks and settings) into one coherent
output bundle, resolving overlaps by priority and per-section policy.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
