# core/response.py

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    # === Not Found ===
    NOT_FOUND = "NOT_FOUND"

    # === Validation Failures ===
    # required argument or attribute is missing
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

    # input structure is malformed or incomplete
    INVALID_INPUT = "INVALID_INPUT"

    # field value is out of bounds or incorrectly formatted
    INVALID_FIELD_VALUE = "INVALID_FIELD_VALUE"

    # the value is valid in isolation, but violates system rules
    VALIDATION_FAILED = "VALIDATION_FAILED"

    # === State Restrictions ===

    # mutation attempted on a locked gradebook
    LOCK_VIOLATION = "LOCK_VIOLATION"

    # actor lacks the administrative role required for the operation
    PERMISSION_DENIED = "PERMISSION_DENIED"

    # stored version no longer matches the version the caller read
    VERSION_CONFLICT = "VERSION_CONFLICT"

    # === Internal Faults ===
    INTERNAL_ERROR = "INTERNAL_ERROR"


class PolicyWarning(Enum):
    # total item weight exceeds the configured threshold (100% by default)
    WEIGHT_OVER_100 = "WEIGHT_OVER_100"


class Response:
    """
    Standard Response object for Gradebook manipulator and lookup methods.

    Attributes:
        success (bool): Indicates whether the operation succeeded.
        detail (str | None): Optional human-readable explanation.
        error (ErrorCode | str | None): Optional machine-readable error identifier.
        status_code (int | None): Optional HTTP response code.
        data (dict): Optional payload, varies by operation.
    """

    def __init__(
        self,
        success: bool,
        detail: str | None = None,
        error: ErrorCode | str | None = None,
        status_code: int | None = None,
        data: dict | None = None,
    ):
        self._success = success
        self._detail = detail
        self._error = error
        self._status_code = status_code
        self._data = data or {}

    # === properties ===

    @property
    def success(self) -> bool:
        return self._success

    @property
    def detail(self) -> str | None:
        return self._detail

    @property
    def error(self) -> ErrorCode | str | None:
        return self._error

    @property
    def status_code(self) -> int | None:
        return self._status_code

    @property
    def data(self) -> dict:
        return self._data or {}

    @property
    def warnings(self) -> list[PolicyWarning]:
        return list(self.data.get("warnings", []))

    # === public classmethods ===

    @classmethod
    def succeed(
        cls,
        detail: str | None = None,
        status_code: int | None = 200,
        data: dict | None = None,
    ) -> Response:
        return cls(
            success=True,
            detail=detail,
            error=None,
            status_code=status_code,
            data=data,
        )

    @classmethod
    def fail(
        cls,
        detail: str | None = None,
        error: ErrorCode | str | None = None,
        status_code: int | None = 400,
        data: dict | None = None,
    ) -> Response:
        return cls(
            success=False,
            detail=detail,
            error=error,
            status_code=status_code,
            data=data,
        )

    @classmethod
    def forward(cls, response: Response, prefix: str) -> Response:
        """
        Re-wraps a failed inner `Response` with a caller-specific detail prefix.
        """
        return cls.fail(
            detail=f"{prefix}: {response.detail}",
            error=response.error,
            status_code=response.status_code,
            data=response.data,
        )

    # === persistence and import ===

    def to_dict(self) -> dict:
        data = dict(self.data)
        if "warnings" in data:
            data["warnings"] = [w.value for w in data["warnings"]]

        return {
            "success": self.success,
            "error": self.error.value if isinstance(self.error, Enum) else self.error,
            "detail": self.detail,
            "data": data,
            "status_code": self.status_code,
        }

    @classmethod
    def from_dict(cls, payload: dict) -> Response:
        error = payload.get("error")

        if error in ErrorCode._value2member_map_:
            error = ErrorCode(error)

        data = dict(payload.get("data", {}))
        if "warnings" in data:
            data["warnings"] = [PolicyWarning(w) for w in data["warnings"]]

        return cls(
            success=payload["success"],
            error=error,
            detail=payload.get("detail"),
            data=data,
            status_code=payload.get("status_code"),
        )

    # === dunder methods ===

    def __str__(self) -> str:
        if self.success:
            return f"Success: {self.detail or ''}"
        else:
            error_str = (
                self.error.value if isinstance(self.error, Enum) else self.error or ""
            )
            return f"Error: {error_str}"
