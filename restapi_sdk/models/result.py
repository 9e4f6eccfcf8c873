"""Success/failure result envelope that servers commonly answer with."""

from typing import Any

from pydantic import BaseModel, ConfigDict

DEFAULT_SUCCESS_MSG = "Operation succeeded"
DEFAULT_FAIL_MSG = "Operation failed"


def _format_msg(args: tuple[str, ...], default: str) -> str:
    if len(args) > 1:
        return args[0] % args[1:]
    return args[0] if args else default


class Result(BaseModel):
    """Result envelope.

    Required fields:
        success: Whether the operation succeeded
        msg: Human-readable outcome message

    Any other field is kept as an extra field.
    """

    model_config = ConfigDict(extra="allow")

    success: bool = False
    msg: str = DEFAULT_FAIL_MSG

    @property
    def is_success(self) -> bool:
        return self.success

    def to_success(self, *args: str) -> "Result":
        """Mark as succeeded. With several args the first is a %-format for the rest."""
        self.success = True
        self.msg = _format_msg(args, DEFAULT_SUCCESS_MSG)
        return self

    def to_fail(self, *args: str) -> "Result":
        """Mark as failed. With several args the first is a %-format for the rest."""
        self.success = False
        self.msg = _format_msg(args, DEFAULT_FAIL_MSG)
        return self

    def x_put(self, key: str, value: Any) -> "Result":
        setattr(self, key, value)
        return self

    def get(self, key: str, default: Any = None) -> Any:
        if key in type(self).model_fields:
            return getattr(self, key)
        return (self.model_extra or {}).get(key, default)

    def contains(self, key: str) -> bool:
        return key in type(self).model_fields or key in (self.model_extra or {})
