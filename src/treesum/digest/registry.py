"""Algorithm capability table.

Maps algorithm names to constructors of hash primitives. The table is
built explicitly and handed to the engine; there is no process-wide
registry.
"""

import hashlib
from collections.abc import Callable, Iterable, Iterator, Mapping
from functools import partial

from loguru import logger

from treesum.digest.adapter import DigestAdapter
from treesum.errors import UnsupportedAlgorithmError
from treesum.ports.digest import DigestFactory, HashPrimitive

PrimitiveConstructor = Callable[[], HashPrimitive]


class AlgorithmTable(Mapping[str, PrimitiveConstructor]):
    """Immutable mapping of algorithm name to primitive constructor."""

    def __init__(self, constructors: Mapping[str, PrimitiveConstructor]) -> None:
        self._constructors = {name.lower(): ctor for name, ctor in constructors.items()}

    @classmethod
    def from_hashlib(cls, names: Iterable[str]) -> "AlgorithmTable":
        """Build a table whose constructors call ``hashlib.new``.

        Names are not checked here; an algorithm the runtime cannot
        provide fails later, at ``resolve`` time.
        """
        return cls({name: partial(hashlib.new, name) for name in names})

    def __getitem__(self, name: str) -> PrimitiveConstructor:
        return self._constructors[name.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._constructors)

    def __len__(self) -> int:
        return len(self._constructors)

    def names(self) -> list[str]:
        """Supported algorithm names, sorted."""
        return sorted(self._constructors)

    def resolve(self, name: str) -> DigestFactory:
        """
        Resolve an algorithm name to a digest factory.

        One primitive is constructed up front so an algorithm that is
        listed but unusable (e.g. disabled by a FIPS build) is rejected
        before any file is opened.

        Args:
            name: Algorithm name, case-insensitive.

        Returns:
            Callable returning a fresh DigestAdapter on every call.

        Raises:
            UnsupportedAlgorithmError: If the name is unknown or the runtime
                cannot construct the algorithm.
        """
        try:
            constructor = self[name]
        except KeyError:
            raise UnsupportedAlgorithmError(name, "not in algorithm table") from None

        try:
            constructor()
        except (ValueError, TypeError) as e:
            logger.warning("Algorithm {} is listed but unavailable: {}", name, e)
            raise UnsupportedAlgorithmError(name, str(e)) from e

        def factory() -> DigestAdapter:
            return DigestAdapter(constructor())

        return factory
