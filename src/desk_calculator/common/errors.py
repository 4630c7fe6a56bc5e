"""Failures raised while evaluating an expression."""
from desk_calculator.common.models import EvaluationErrorKind


class EvaluationError(ValueError):
    """Base class for every malformed-expression failure."""

    kind: EvaluationErrorKind = EvaluationErrorKind.MALFORMED_EXPRESSION


class EmptyInputError(EvaluationError):
    kind = EvaluationErrorKind.EMPTY_INPUT


class MalformedNumberError(EvaluationError):
    kind = EvaluationErrorKind.MALFORMED_NUMBER


class UnbalancedParenthesesError(EvaluationError):
    kind = EvaluationErrorKind.UNBALANCED_PARENTHESES


class StackUnderflowError(EvaluationError):
    kind = EvaluationErrorKind.STACK_UNDERFLOW


class InvalidCharacterError(EvaluationError):
    kind = EvaluationErrorKind.INVALID_CHARACTER
