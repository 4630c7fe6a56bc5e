"""Calculator session driven by keypad presses."""
from decimal import Decimal
import math
import re
from typing import List

from pydantic import BaseModel, Field

from desk_calculator.common.evaluator import ExpressionEvaluator
from desk_calculator.common.logger import logger
from desk_calculator.common.models import (
    CalculatorSettings,
    EvaluationErrorKind,
    EvaluationResult,
    HistoryRecord,
)
from desk_calculator.session.buffer import InputBuffer
from desk_calculator.session.history import HistoryLog


CLEAR_KEY = "C"
CLEAR_ALL_KEY = "AC"
EQUALS_KEY = "="
BACKSPACE_KEYS = ("←", "<")

# Multi-character keys first so that "AC" is not read as "A" then "C"
_KEY_PATTERN = re.compile(r"AC|C|←|<|.", re.DOTALL)


class Calculator(BaseModel):
    """
    Keypad calculator session: an input buffer, a display and a history log.

    Key handling:
        - ``C`` clears the input and the display.
        - ``AC`` also clears the history.
        - ``←`` (or ``<``) deletes the last typed character.
        - ``=`` evaluates the input.
        - Any other key is appended to the input.

    After a failed evaluation the display shows the error text and the input
    is discarded. The history only records successful evaluations.
    """

    settings: CalculatorSettings = Field(default_factory=CalculatorSettings, description="Presentation settings")
    buffer: InputBuffer = Field(default_factory=InputBuffer, description="Expression being typed")
    history: HistoryLog = Field(default_factory=HistoryLog, description="Successful evaluations")
    display: str = Field(default="", description="Text currently shown on the display")

    @staticmethod
    def split_keys(text: str) -> List[str]:
        """
        Split a string of key labels into individual key presses.

        :param str text: Key labels, e.g. ``"12+3="`` or ``"AC7<8="``

        :return: Key labels in order
        :rtype: List[str]
        """
        return _KEY_PATTERN.findall(text)

    def press(self, key: str) -> str:
        """
        Handle one key press.

        :param str key: Key label

        :return: Display text after the key press
        :rtype: str
        """
        if key == CLEAR_KEY:
            self.buffer.clear()
            self.display = ""
        elif key in BACKSPACE_KEYS:
            if not self.buffer.is_empty:
                self.buffer.delete_last()
                self.display = self.buffer.text
        elif key == CLEAR_ALL_KEY:
            self.history.clear()
            self.buffer.clear()
            self.display = ""
        elif key == EQUALS_KEY:
            self.compute()
        else:
            self.buffer.append(key)
            self.display = self.buffer.text
        return self.display

    def press_sequence(self, text: str) -> str:
        """
        Press every key of ``text`` in order.

        :param str text: Key labels

        :return: Display text after the last key press
        :rtype: str
        """
        for key in self.split_keys(text):
            self.press(key)
        return self.display

    def compute(self) -> EvaluationResult:
        """
        Evaluate the input buffer, update the display and record the result.

        An empty or blank buffer is left alone.

        :return: Evaluation outcome
        :rtype: EvaluationResult
        """
        expression: str = self.buffer.text
        result: EvaluationResult = ExpressionEvaluator.evaluate(expression)
        if result.error is EvaluationErrorKind.EMPTY_INPUT:
            return result

        if not result.ok:
            logger.warning(f"🧮❌ Evaluation failed ({result.error.value}): {expression!r}")
            self.display = self.settings.error_text
            self.buffer.clear()
            return result

        shown: str = ExpressionEvaluator.format_result(result.value, self.settings.decimal_places)
        logger.info(f"🧮✅ {expression} = {shown}")
        self.display = shown
        self.history.append(HistoryRecord(expression=expression, display=shown))

        # Keep typing from the full-precision result, unless it cannot be parsed back
        if self.settings.carry_result and math.isfinite(result.value) and result.value >= 0:
            self.buffer.replace(self.carry_text(result.value))
        else:
            self.buffer.clear()
        return result

    @staticmethod
    def carry_text(value: float) -> str:
        """
        Write a finite, non-negative value as a number literal the evaluator reads back exactly.

        Integral values lose their decimal point. Other values keep the shortest
        round-trip digits, written without an exponent.

        :param float value: Result to carry

        :return: Digits and at most one decimal point
        :rtype: str
        """
        if value == int(value):
            return str(int(value))
        return format(Decimal(repr(value)), "f")

    def history_text(self) -> str:
        """Render the history panel."""
        return self.history.render(self.settings.record_separator)
