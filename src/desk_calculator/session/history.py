"""History of successful evaluations."""
from typing import List

from pydantic import BaseModel, Field

from desk_calculator.common.models import HistoryRecord


class HistoryLog(BaseModel):
    """Ordered log of ``expression = result`` records, oldest first."""

    records: List[HistoryRecord] = Field(default_factory=list, description="Records in evaluation order")

    def __len__(self) -> int:
        return len(self.records)

    def append(self, record: HistoryRecord) -> None:
        self.records.append(record)

    def clear(self) -> None:
        self.records.clear()

    def lines(self, separator: str = " = ") -> List[str]:
        """
        Render every record as a single line.

        :param str separator: Text placed between expression and result

        :return: Lines such as ``"2+3 = 5"``
        :rtype: List[str]
        """
        return [record.render(separator) for record in self.records]

    def render(self, separator: str = " = ") -> str:
        """
        Render the log the way the history panel shows it, one record per line.

        :param str separator: Text placed between expression and result

        :return: Newline-terminated lines, or an empty string for an empty log
        :rtype: str
        """
        return "".join(f"{line}\n" for line in self.lines(separator))
