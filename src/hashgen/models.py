"""Value types shared by the registry, the worker pool and the engine facade."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Literal, Mapping, Optional, Tuple

OutputFormat = Literal["hex", "base64", "standard"]
OUTPUT_FORMATS: Tuple[str, ...] = ("hex", "base64", "standard")

_OPTION_KEYS = {
    "salt": "salt",
    "iterations": "iterations",
    "costFactor": "cost_factor",
    "cost_factor": "cost_factor",
    "outputFormat": "output_format",
    "output_format": "output_format",
    "uppercase": "uppercase",
}


@dataclass(frozen=True)
class HashOptions:
    """Per-request options; never mutated once built."""

    salt: Optional[str] = None
    iterations: Optional[int] = None
    cost_factor: Optional[int] = None
    output_format: OutputFormat = "hex"
    uppercase: bool = False

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> "HashOptions":
        """Build options from a plain mapping using camelCase or snake_case keys."""
        if not mapping:
            return cls()
        values = {}
        for key, value in mapping.items():
            attr = _OPTION_KEYS.get(key)
            if attr is None or value is None:
                continue
            values[attr] = value
        if values.get("salt") == "":
            values.pop("salt")
        if "output_format" in values:
            values["output_format"] = str(values["output_format"]).lower()
        return cls(**values)

    def with_salt(self, salt: str) -> "HashOptions":
        return replace(self, salt=salt)

    def to_dict(self) -> dict:
        return {
            "salt": self.salt,
            "iterations": self.iterations,
            "costFactor": self.cost_factor,
            "outputFormat": self.output_format,
            "uppercase": self.uppercase,
        }


ComputeFn = Callable[[str, HashOptions], str]
ValidateFn = Callable[[HashOptions], None]


@dataclass(frozen=True)
class AlgorithmDescriptor:
    """Immutable description of one registered algorithm.

    ``compute`` and ``validate`` must be module-level functions so the
    descriptor can travel to worker processes by reference.
    """

    id: str
    name: str
    category: str
    compute: ComputeFn
    supports_salt: bool = False
    default_iterations: Optional[int] = None
    default_cost_factor: Optional[int] = None
    validate: Optional[ValidateFn] = None
    approximation: bool = False


def new_request_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class HashRequest:
    text: str
    algorithm_id: str
    options: HashOptions = field(default_factory=HashOptions)
    id: str = field(default_factory=new_request_id)


@dataclass(frozen=True)
class BulkItem:
    text: str
    original_index: int


@dataclass(frozen=True)
class Batch:
    batch_id: str
    items: Tuple[BulkItem, ...]

    @classmethod
    def partition(cls, batch_id: str, texts: List[str], batch_size: int) -> List["Batch"]:
        """Split ``texts`` into consecutive batches sharing ``batch_id``."""
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        batches = []
        for start in range(0, len(texts), batch_size):
            chunk = texts[start:start + batch_size]
            items = tuple(
                BulkItem(text=text, original_index=start + offset)
                for offset, text in enumerate(chunk)
            )
            batches.append(cls(batch_id=batch_id, items=items))
        return batches
