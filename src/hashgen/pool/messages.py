"""Messages exchanged between the scheduler and its worker processes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..models import AlgorithmDescriptor, BulkItem, HashOptions


@dataclass(frozen=True)
class GenerateMessage:
    id: str
    text: str
    algorithm: AlgorithmDescriptor
    options: HashOptions


@dataclass(frozen=True)
class BulkGenerateMessage:
    batch_id: str
    items: Tuple[BulkItem, ...]
    algorithm: AlgorithmDescriptor
    options: HashOptions


@dataclass(frozen=True)
class ResultMessage:
    worker_id: int
    id: str
    digest: str

    @property
    def correlation_id(self) -> str:
        return self.id


@dataclass(frozen=True)
class BulkResultMessage:
    worker_id: int
    batch_id: str
    results: Tuple[Tuple[int, str], ...]

    @property
    def correlation_id(self) -> str:
        return self.batch_id


@dataclass(frozen=True)
class ErrorMessage:
    worker_id: int
    error: str
    id: Optional[str] = None
    batch_id: Optional[str] = None

    @property
    def correlation_id(self) -> Optional[str]:
        return self.id if self.id is not None else self.batch_id


Request = Union[GenerateMessage, BulkGenerateMessage]
Reply = Union[ResultMessage, BulkResultMessage, ErrorMessage]
