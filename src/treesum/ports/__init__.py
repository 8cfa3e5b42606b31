"""Port interfaces for treesum.

Ports define the contracts the engine depends on, so digest
primitives and test doubles can be swapped in without touching
the engine.
"""

from treesum.ports.digest import DigestFactory, DigestPort, HashPrimitive

__all__ = [
    "DigestFactory",
    "DigestPort",
    "HashPrimitive",
]
