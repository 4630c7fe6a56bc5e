"""Text buffer holding the expression being typed."""
from pydantic import BaseModel, Field


class InputBuffer(BaseModel):
    """
    Mutable buffer accumulating keypad characters.

    The buffer is owned by a single calculator session and never shared.
    """

    text: str = Field(default="", description="Characters typed so far")

    @property
    def is_empty(self) -> bool:
        return not self.text

    def append(self, chars: str) -> None:
        """Append typed characters at the end of the buffer."""
        self.text += chars

    def delete_last(self) -> None:
        """Remove the last character, if any."""
        self.text = self.text[:-1]

    def clear(self) -> None:
        self.text = ""

    def replace(self, text: str) -> None:
        """Replace the whole content of the buffer."""
        self.text = text
