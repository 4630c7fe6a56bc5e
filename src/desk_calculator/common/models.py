"""Pydantic models shared by the evaluator, the session and the batch runner."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EvaluationErrorKind(str, Enum):
    """Why an expression could not be evaluated."""

    EMPTY_INPUT = "empty_input"
    MALFORMED_NUMBER = "malformed_number"
    UNBALANCED_PARENTHESES = "unbalanced_parentheses"
    STACK_UNDERFLOW = "stack_underflow"
    INVALID_CHARACTER = "invalid_character"
    MALFORMED_EXPRESSION = "malformed_expression"


class EvaluationResult(BaseModel):
    """
    Outcome of a single evaluation.

    Either ``value`` is set (possibly NaN, after a division by zero) or ``error`` is.
    """

    model_config = ConfigDict(frozen=True)

    expression: str = Field(..., description="Expression as typed by the user")
    value: Optional[float] = Field(default=None, description="Computed value on success")
    error: Optional[EvaluationErrorKind] = Field(default=None, description="Failure kind")
    message: Optional[str] = Field(default=None, description="Diagnostic message on failure")

    @property
    def ok(self) -> bool:
        return self.error is None


class HistoryRecord(BaseModel):
    """One ``expression = result`` line of the history log."""

    model_config = ConfigDict(frozen=True)

    expression: str = Field(..., min_length=1, description="Evaluated expression")
    display: str = Field(..., description="Formatted result")

    def render(self, separator: str = " = ") -> str:
        return f"{self.expression}{separator}{self.display}"


class CalculatorSettings(BaseModel):
    """Presentation settings of a calculator session."""

    # Settings are shared by reference, keep them read-only
    model_config = ConfigDict(frozen=True)

    decimal_places: int = Field(default=4, ge=0, le=15, description="Digits after the point for fractional results")
    error_text: str = Field(default="Error", description="Display text after a failed evaluation")
    record_separator: str = Field(default=" = ", description="Separator between expression and result in history")
    carry_result: bool = Field(default=True, description="Keep a finite result in the input buffer after '='")
