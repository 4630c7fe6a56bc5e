"""Test classes InputBuffer, HistoryLog and Calculator."""
import pytest

from desk_calculator.common.models import CalculatorSettings, EvaluationErrorKind, HistoryRecord
from desk_calculator.session.buffer import InputBuffer
from desk_calculator.session.calculator import Calculator
from desk_calculator.session.history import HistoryLog


def test_input_buffer_editing() -> None:
    """Append, delete_last, replace and clear edit the buffer text."""
    buffer = InputBuffer()
    assert buffer.is_empty

    buffer.append("1")
    buffer.append("2+")
    assert buffer.text == "12+"

    buffer.delete_last()
    assert buffer.text == "12"

    buffer.replace("7")
    assert buffer.text == "7"

    buffer.clear()
    assert buffer.is_empty


def test_input_buffer_delete_last_on_empty() -> None:
    """Deleting from an empty buffer leaves it empty."""
    buffer = InputBuffer()
    buffer.delete_last()
    assert buffer.text == ""


def test_history_log_render() -> None:
    """History renders one newline-terminated line per record."""
    history = HistoryLog()
    history.append(HistoryRecord(expression="2+3", display="5"))
    history.append(HistoryRecord(expression="7/2", display="3.5000"))

    assert len(history) == 2
    assert history.lines() == ["2+3 = 5", "7/2 = 3.5000"]
    assert history.render() == "2+3 = 5\n7/2 = 3.5000\n"
    assert history.lines(separator=" -> ") == ["2+3 -> 5", "7/2 -> 3.5000"]

    history.clear()
    assert len(history) == 0
    assert history.render() == ""


@pytest.mark.parametrize("text,expected", [
    ("12+3=", ["1", "2", "+", "3", "="]),
    ("AC7<8=", ["AC", "7", "<", "8", "="]),
    ("9←C", ["9", "←", "C"]),
])
def test_split_keys(text, expected) -> None:
    """Multi-character keys are recognised before single characters."""
    assert Calculator.split_keys(text) == expected


@pytest.mark.parametrize("keys,display", [
    ("2+3=", "5"),
    ("2.5*4=", "10"),
    ("7/2=", "3.5000"),
    ("10%3=", "1"),
    ("(1+2)*3=", "9"),
    ("2+3*4=", "14"),
    ("5/0=", "NaN"),
    ("2-5=", "-3"),
])
def test_calculator_equals_shows_result(keys, display) -> None:
    """Pressing '=' shows the formatted result and records it in history."""
    calculator = Calculator()
    assert calculator.press_sequence(keys) == display
    expression = keys[:-1]
    assert calculator.history.lines() == [f"{expression} = {display}"]


@pytest.mark.parametrize("keys", ["1+=", "*2=", "(1+2=", "1+2)=", "1..2="])
def test_calculator_error_discards_input(keys) -> None:
    """A malformed expression shows 'Error', empties the input and leaves history alone."""
    calculator = Calculator()
    calculator.press_sequence("1+1=")
    calculator.press("C")

    assert calculator.press_sequence(keys) == "Error"
    assert calculator.buffer.is_empty
    assert calculator.history.lines() == ["1+1 = 2"]


def test_calculator_compute_returns_result() -> None:
    """compute exposes the evaluation outcome."""
    calculator = Calculator()
    calculator.press_sequence("1+")
    result = calculator.compute()
    assert not result.ok
    assert result.error == EvaluationErrorKind.STACK_UNDERFLOW


def test_calculator_equals_on_empty_input_is_noop() -> None:
    """'=' with nothing typed changes nothing."""
    calculator = Calculator()
    assert calculator.press("=") == ""
    assert len(calculator.history) == 0


def test_calculator_keeps_typing_from_result() -> None:
    """A finite non-negative result becomes the new input."""
    calculator = Calculator()
    calculator.press_sequence("2+3=")
    assert calculator.buffer.text == "5"

    assert calculator.press_sequence("*2=") == "10"
    assert calculator.history.lines() == ["2+3 = 5", "5*2 = 10"]


@pytest.mark.parametrize("keys,display", [
    ("1/3=*3=", "1"),
    ("2/3=*3=", "2"),
    ("10/4=*2=", "5"),
])
def test_calculator_chained_result_keeps_precision(keys, display) -> None:
    """The carried result is not rounded to the displayed decimals."""
    calculator = Calculator()
    assert calculator.press_sequence(keys) == display


@pytest.mark.parametrize("value,expected", [
    (5.0, "5"),
    (1 / 3, "0.3333333333333333"),
    (2.5, "2.5"),
    (0.00001, "0.00001"),
    (1e20, "100000000000000000000"),
])
def test_carry_text(value, expected) -> None:
    """Carried results are plain literals without exponent."""
    assert Calculator.carry_text(value) == expected


def test_calculator_carries_full_precision_after_equals() -> None:
    """The buffer holds the unrounded result while the display shows four decimals."""
    calculator = Calculator()
    assert calculator.press_sequence("1/3=") == "0.3333"
    assert calculator.buffer.text == "0.3333333333333333"


@pytest.mark.parametrize("keys", ["5/0=", "2-5="])
def test_calculator_does_not_carry_unparsable_result(keys) -> None:
    """NaN and negative results are not kept as input."""
    calculator = Calculator()
    calculator.press_sequence(keys)
    assert calculator.buffer.is_empty


def test_calculator_carry_result_disabled() -> None:
    """With carry_result off the input is emptied after '='."""
    calculator = Calculator(settings=CalculatorSettings(carry_result=False))
    calculator.press_sequence("2+3=")
    assert calculator.buffer.is_empty
    assert calculator.display == "5"


@pytest.mark.parametrize("backspace", ["<", "←"])
def test_calculator_backspace(backspace) -> None:
    """Backspace removes the last character without evaluating."""
    calculator = Calculator()
    assert calculator.press_sequence(f"12+{backspace}") == "12"
    assert calculator.buffer.text == "12"
    assert len(calculator.history) == 0


def test_calculator_backspace_on_empty_input() -> None:
    """Backspace on an empty input keeps the display as is."""
    calculator = Calculator()
    calculator.press_sequence("1+=")
    assert calculator.press("<") == "Error"


def test_calculator_clear_keeps_history() -> None:
    """'C' clears the input and display but not the history."""
    calculator = Calculator()
    calculator.press_sequence("2+3=")
    assert calculator.press_sequence("4C") == ""
    assert calculator.buffer.is_empty
    assert calculator.history.lines() == ["2+3 = 5"]


def test_calculator_clear_all_clears_history() -> None:
    """'AC' clears the input, the display and the history."""
    calculator = Calculator()
    calculator.press_sequence("2+3=7")
    assert calculator.press("AC") == ""
    assert calculator.buffer.is_empty
    assert len(calculator.history) == 0


def test_calculator_custom_settings() -> None:
    """Settings change the error text, the decimals and the history separator."""
    settings = CalculatorSettings(decimal_places=2, error_text="ERR", record_separator=" => ")
    calculator = Calculator(settings=settings)

    assert calculator.press_sequence("7/2=") == "3.50"
    assert calculator.history_text() == "7/2 => 3.50\n"
    calculator.press("C")
    assert calculator.press_sequence("1+=") == "ERR"
