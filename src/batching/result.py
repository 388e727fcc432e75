"""Operation outcome returned by the batch engine instead of raising."""

from dataclasses import dataclass, field
from typing import Any

from batching.errors import BatchError


@dataclass
class Result:
    value: Any = None
    error: BatchError | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value, warnings: list[str] | None = None) -> "Result":
        return cls(value=value, warnings=list(warnings or []))

    @classmethod
    def failure(cls, error: BatchError) -> "Result":
        return cls(error=error)
