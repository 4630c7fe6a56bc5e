"""Parse and evaluate calculator expressions safely."""
import math
import operator
from typing import Callable, Dict, List, Tuple

from desk_calculator.common.errors import (
    EmptyInputError,
    EvaluationError,
    InvalidCharacterError,
    MalformedNumberError,
    StackUnderflowError,
    UnbalancedParenthesesError,
)
from desk_calculator.common.logger import logger
from desk_calculator.common.models import EvaluationResult


# Type alias for operator functions (taking two floats, returning a float)
OperatorFn = Callable[[float, float], float]

DEFAULT_DECIMAL_PLACES: int = 4
NAN_TEXT: str = "NaN"

NUMBER_CHARS: str = "0123456789."
OPEN_PAREN: str = "("
CLOSE_PAREN: str = ")"
PARENTHESES: str = OPEN_PAREN + CLOSE_PAREN


def _divide(a: float, b: float) -> float:
    # Division by zero yields NaN instead of failing
    if b == 0:
        return math.nan
    return a / b


def _remainder(a: float, b: float) -> float:
    # Truncating remainder: the result has the sign of the dividend
    if b == 0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


# Mapping of operator symbols to (precedence tier, function)
OPERATORS: Dict[str, Tuple[int, OperatorFn]] = {
    "+": (1, operator.add),
    "-": (1, operator.sub),
    "*": (2, operator.mul),
    "/": (2, _divide),
    "%": (2, _remainder),
}


class ExpressionEvaluator:
    """
    Evaluate infix arithmetic expressions typed on a calculator keypad.

    Supported syntax:
        - Non-negative decimal literals (``12``, ``0.5``, ``.5``, ``5.``)
        - Binary operators ``+ - * / %``, with ``* / %`` binding tighter than ``+ -``
        - Parentheses

    Algorithm:
        A single left-to-right pass with two stacks (operands and operators).
        Each time an operator is popped it is applied right away to the two
        topmost operands, so no RPN list or tree is built.

    Examples:
        - ``2+3*4`` evaluates to ``14``
        - ``(1+2)*3`` evaluates to ``9``
        - ``5/0`` evaluates to NaN

    The evaluator holds no state: both stacks live for the duration of one call.
    """

    @staticmethod
    def tokenize(expr: str) -> List[str]:
        """
        Split an expression into number literals and operator characters.

        Whitespace is skipped. Number literals are the maximal runs of digits and
        decimal points; they are not validated here.

        :param str expr: Expression as typed

        :return: List of tokens
        :rtype: List[str]
        :raises InvalidCharacterError: If a character is neither a digit, a point, an operator nor a parenthesis
        """
        tokens: List[str] = []
        i = 0
        while i < len(expr):
            char = expr[i]
            if char in NUMBER_CHARS:
                start = i
                while i < len(expr) and expr[i] in NUMBER_CHARS:
                    i += 1
                tokens.append(expr[start:i])
                continue
            if char in OPERATORS or char in PARENTHESES:
                tokens.append(char)
            elif not char.isspace():
                raise InvalidCharacterError(f"Unexpected character {char!r} at position {i}: {expr}")
            i += 1
        return tokens

    @staticmethod
    def _parse_number(literal: str) -> float:
        """
        Convert a number literal into a float.

        :param str literal: Run of digits and decimal points

        :return: Parsed value
        :rtype: float
        :raises MalformedNumberError: If the literal is not a valid decimal number (e.g. ``1..2``)
        """
        try:
            return float(literal)
        except ValueError:
            raise MalformedNumberError(f"Malformed number: {literal!r}") from None

    @staticmethod
    def has_precedence(incoming: str, stack_top: str) -> bool:
        """
        Tell whether the operator on top of the stack must be applied before pushing ``incoming``.

        Parentheses never yield. Otherwise the stack top is applied first unless it
        belongs to a looser tier than ``incoming``, so operators of the same tier
        evaluate left to right.

        :param str incoming: Operator being scanned
        :param str stack_top: Operator currently on top of the stack

        :return: True if ``stack_top`` must be applied first
        :rtype: bool
        """
        if stack_top in PARENTHESES:
            return False
        return OPERATORS[stack_top][0] >= OPERATORS[incoming][0]

    @staticmethod
    def apply(op: str, left: float, right: float) -> float:
        """
        Apply a binary operator.

        :param str op: One of ``+ - * / %``
        :param float left: Left operand
        :param float right: Right operand

        :return: Result of ``left op right``
        :rtype: float
        :raises KeyError: If ``op`` is not a known operator
        """
        return OPERATORS[op][1](left, right)

    @staticmethod
    def _reduce(operands: List[float], operators: List[str]) -> None:
        """
        Pop one operator and its two operands, and push the result back.

        :param List[float] operands: Operand stack
        :param List[str] operators: Operator stack

        :return: None
        :raises UnbalancedParenthesesError: If the popped operator is an unclosed ``(``
        :raises StackUnderflowError: If fewer than two operands are available
        """
        op = operators.pop()
        if op == OPEN_PAREN:
            raise UnbalancedParenthesesError("Unclosed parenthesis")
        if len(operands) < 2:
            raise StackUnderflowError(f"Not enough operands for {op!r}")
        # The right operand was pushed last
        right = operands.pop()
        left = operands.pop()
        operands.append(ExpressionEvaluator.apply(op, left, right))

    @staticmethod
    def compute(expr: str) -> float:
        """
        Evaluate an expression, raising on malformed input.

        :param str expr: Expression as typed

        :return: Computed value, NaN after a division by zero
        :rtype: float
        :raises EvaluationError: If the expression is empty or malformed
        """
        tokens: List[str] = ExpressionEvaluator.tokenize(expr)
        if not tokens:
            raise EmptyInputError("Empty expression")

        operands: List[float] = []
        operators: List[str] = []

        for token in tokens:
            if token[0] in NUMBER_CHARS:
                operands.append(ExpressionEvaluator._parse_number(token))
            elif token == OPEN_PAREN:
                operators.append(token)
            elif token == CLOSE_PAREN:
                # Reduce everything back to the matching open parenthesis
                while operators and operators[-1] != OPEN_PAREN:
                    ExpressionEvaluator._reduce(operands, operators)
                if not operators:
                    raise UnbalancedParenthesesError(f"Unmatched ')': {expr}")
                operators.pop()
            else:
                while (
                    operators
                    and operators[-1] != OPEN_PAREN
                    and ExpressionEvaluator.has_precedence(token, operators[-1])
                ):
                    ExpressionEvaluator._reduce(operands, operators)
                operators.append(token)

        while operators:
            ExpressionEvaluator._reduce(operands, operators)

        if len(operands) != 1:
            raise StackUnderflowError(f"Invalid expression ({len(operands)} operands left): {expr}")

        return operands[0]

    @staticmethod
    def evaluate(expr: str) -> EvaluationResult:
        """
        Evaluate an expression without raising for malformed input.

        :param str expr: Expression as typed

        :return: Result holding either the value or the failure kind
        :rtype: EvaluationResult
        """
        try:
            value: float = ExpressionEvaluator.compute(expr)
        except EvaluationError as exc:
            logger.debug(f"🧮❌ Could not evaluate {expr!r}: {exc}")
            return EvaluationResult(expression=expr, error=exc.kind, message=str(exc))
        return EvaluationResult(expression=expr, value=value)

    @staticmethod
    def format_result(value: float, decimal_places: int = DEFAULT_DECIMAL_PLACES) -> str:
        """
        Render a value for the display.

        Integral values are shown without a decimal point, other values with a
        fixed number of decimals. NaN is shown as ``NaN``.

        :param float value: Value to render
        :param int decimal_places: Digits after the decimal point for fractional values

        :return: Display text
        :rtype: str
        """
        if math.isnan(value):
            return NAN_TEXT
        if math.isfinite(value) and value == int(value):
            return str(int(value))
        return f"{value:.{decimal_places}f}"


def evaluate(expr: str) -> EvaluationResult:
    """Shortcut for :meth:`ExpressionEvaluator.evaluate`."""
    return ExpressionEvaluator.evaluate(expr)


def format_result(value: float, decimal_places: int = DEFAULT_DECIMAL_PLACES) -> str:
    """Shortcut for :meth:`ExpressionEvaluator.format_result`."""
    return ExpressionEvaluator.format_result(value, decimal_places)
