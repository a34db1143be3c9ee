from typing import Optional


class ParseError(ValueError):
    """Syntax error in a transformation command string."""

    def __init__(self, message: str, text: Optional[str] = None, position: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.text = text
        self.position = position

    def __str__(self) -> str:
        return self.message
