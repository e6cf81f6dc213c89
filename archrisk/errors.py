"""Exception hierarchy for archrisk.

Every error carries a stable code for programmatic handling plus keyword
context naming the offending element, field and raw value.  The CLI turns
any ``ArchRiskError`` into a user-facing message and a non-zero exit.
"""

from __future__ import annotations

from typing import Any


class ArchRiskError(Exception):
    """Base exception for all archrisk errors."""

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")

    def __repr__(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r}, {ctx_str})"


# ==============================================================================
# Model loading / validation
# ==============================================================================


class ModelValidationError(ArchRiskError):
    """The model document is structurally or referentially invalid."""

    code_name = "MODEL_VALIDATION_ERROR"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(code=self.code_name, message=message, **context)


class UnknownValueError(ModelValidationError):
    """An enum-valued field holds a string outside its closed value set."""

    code_name = "UNKNOWN_VALUE"


class InvalidIdError(ModelValidationError):
    """An id does not satisfy the id syntax."""

    code_name = "INVALID_ID"


class DuplicateIdError(ModelValidationError):
    """An id is declared more than once."""

    code_name = "DUPLICATE_ID"


class MissingReferenceError(ModelValidationError):
    """A reference points at an element (or tag) that was never declared."""

    code_name = "MISSING_REFERENCE"


class MultipleTrustBoundariesError(ModelValidationError):
    """A technical asset is directly contained by more than one trust boundary."""

    code_name = "MULTIPLE_TRUST_BOUNDARIES"


class InvalidDateError(ModelValidationError):
    """A date field is not in YYYY-MM-DD form."""

    code_name = "INVALID_DATE"


# ==============================================================================
# Risk tracking
# ==============================================================================


class RiskTrackingError(ArchRiskError):
    """A risk tracking record references no generated risk."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(code="ORPHANED_RISK_TRACKING", message=message, **context)


# ==============================================================================
# Plugins
# ==============================================================================


class PluginError(ArchRiskError):
    """An out-of-process plugin failed, timed out or returned malformed output."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(code="PLUGIN_FAILED", message=message, **context)
