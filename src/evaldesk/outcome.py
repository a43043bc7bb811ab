"""Tagged success/failure result returned by every EvalService operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from evaldesk.errors import EvalDeskError

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either ``data`` (success) or ``error``/``code``/``details`` (failure)."""

    success: bool
    data: T | None = None
    message: str | None = None
    error: str | None = None
    code: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    exception: EvalDeskError | None = field(default=None, repr=False, compare=False)

    @classmethod
    def ok(cls, data: T, message: str | None = None) -> Outcome[T]:
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, exc: EvalDeskError) -> Outcome[T]:
        return cls(
            success=False,
            error=exc.message,
            code=exc.code,
            details=exc.context(),
            exception=exc,
        )

    def unwrap(self) -> T:
        """Return ``data`` or re-raise the error behind a failed outcome."""
        if not self.success:
            if self.exception is not None:
                raise self.exception
            raise EvalDeskError(self.error or "operation failed", details=self.details)
        return self.data  # type: ignore[return-value]

    def to_dict(self) -> dict[str, Any]:
        """Render as the API envelope: success/data/message or success/error/code/details."""
        if self.success:
            payload: dict[str, Any] = {"success": True, "data": _jsonable(self.data)}
            if self.message:
                payload["message"] = self.message
            return payload
        payload = {"success": False, "error": self.error, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


def _jsonable(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value
