"""Domain models for rk_block — pure dataclasses."""

from dataclasses import dataclass, field
from typing import Any

from src.rk_operations.domain.models import Operation


@dataclass(frozen=True)
class MappedTransaction:
    hash: str
    operations: list[Operation] = field(default_factory=list)
    metadata: dict[str, Any] | None = None
