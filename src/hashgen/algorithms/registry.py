"""Registry mapping algorithm ids to their descriptors."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from ..errors import UnsupportedAlgorithm
from ..models import AlgorithmDescriptor, HashOptions
from . import crypt, digests, kdf, network
from .base import check_common, compute_digest

CATEGORY_ORDER = ("basic", "password", "modern", "special")

DEFAULT_ALIASES = {
    "sha-256-crypt": "sha256-crypt",
    "sha-512-crypt": "sha512-crypt",
}


class AlgorithmRegistry:
    """In-memory lookup table of hashing algorithms."""

    def __init__(self, descriptors: Iterable[AlgorithmDescriptor] = ()) -> None:
        self._descriptors: Dict[str, AlgorithmDescriptor] = {}
        self._aliases: Dict[str, str] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: AlgorithmDescriptor, *, aliases: Iterable[str] = ()) -> None:
        if descriptor.id in self._descriptors or descriptor.id in self._aliases:
            raise ValueError(f"Algorithm {descriptor.id!r} is already registered")
        self._descriptors[descriptor.id] = descriptor
        for alias in aliases:
            self.add_alias(alias, descriptor.id)

    def add_alias(self, alias: str, algorithm_id: str) -> None:
        if algorithm_id not in self._descriptors:
            raise UnsupportedAlgorithm(algorithm_id)
        if alias in self._descriptors:
            raise ValueError(f"Alias {alias!r} shadows a registered algorithm")
        self._aliases[alias] = algorithm_id

    def resolve(self, algorithm_id: str) -> Optional[AlgorithmDescriptor]:
        key = self._aliases.get(algorithm_id, algorithm_id)
        return self._descriptors.get(key)

    def get(self, algorithm_id: str) -> AlgorithmDescriptor:
        descriptor = self.resolve(algorithm_id)
        if descriptor is None:
            raise UnsupportedAlgorithm(algorithm_id)
        return descriptor

    def __contains__(self, algorithm_id: object) -> bool:
        return isinstance(algorithm_id, str) and self.resolve(algorithm_id) is not None

    def __len__(self) -> int:
        return len(self._descriptors)

    def ids(self) -> List[str]:
        return list(self._descriptors)

    def descriptors(self) -> List[AlgorithmDescriptor]:
        return list(self._descriptors.values())

    def categories(self) -> List[str]:
        present = {descriptor.category for descriptor in self._descriptors.values()}
        known = [category for category in CATEGORY_ORDER if category in present]
        return known + sorted(present.difference(CATEGORY_ORDER))

    def by_category(self) -> Dict[str, List[AlgorithmDescriptor]]:
        grouped: Dict[str, List[AlgorithmDescriptor]] = {}
        for category in self.categories():
            grouped[category] = []
        for descriptor in self._descriptors.values():
            grouped[descriptor.category].append(descriptor)
        return grouped

    def validate(self, algorithm_id: str, options: HashOptions) -> AlgorithmDescriptor:
        """Resolve ``algorithm_id`` and check ``options`` against it."""
        descriptor = self.get(algorithm_id)
        check_common(descriptor.id, options)
        if descriptor.validate is not None:
            descriptor.validate(options)
        return descriptor

    def compute(self, algorithm_id: str, text: str, options: Optional[HashOptions] = None) -> str:
        options = options or HashOptions()
        descriptor = self.validate(algorithm_id, options)
        return compute_digest(descriptor, text, options)


def builtin_descriptors() -> List[AlgorithmDescriptor]:
    return digests.descriptors() + crypt.descriptors() + kdf.descriptors() + network.descriptors()


def default_registry() -> AlgorithmRegistry:
    registry = AlgorithmRegistry(builtin_descriptors())
    for alias, target in DEFAULT_ALIASES.items():
        registry.add_alias(alias, target)
    return registry
