"""
Input sanitization for message content and names.

Rejects:
- Null bytes
- Control characters (tab/newline/CR are allowed in message content)
- Blank or oversized values
"""
import re
from typing import Optional


class InputSanitizer:
    """Validates and sanitizes user input."""

    NULL_BYTE_PATTERN = re.compile(r'\x00')
    CONTROL_CHAR_PATTERN = re.compile(r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f]')  # Except \t=0x09, \n=0x0a, \r=0x0d
    LINE_BREAK_PATTERN = re.compile(r'[\t\n\r]')

    @staticmethod
    def sanitize_string(value: str, max_length: Optional[int] = None, allow_newlines: bool = False) -> str:
        """
        Sanitize string input.

        Args:
            value: Input string
            max_length: Optional max length
            allow_newlines: Allow \\t, \\n and \\r (message bodies)

        Returns:
            The value, stripped of surrounding whitespace

        Raises:
            ValueError: If input is blank, too long or contains forbidden characters
        """
        if not isinstance(value, str):
            raise ValueError("Input must be string")

        if InputSanitizer.NULL_BYTE_PATTERN.search(value):
            raise ValueError("Null bytes not allowed")

        if InputSanitizer.CONTROL_CHAR_PATTERN.search(value):
            raise ValueError("Control characters not allowed")

        if not allow_newlines and InputSanitizer.LINE_BREAK_PATTERN.search(value):
            raise ValueError("Line breaks not allowed")

        value = value.strip()
        if not value:
            raise ValueError("Input cannot be empty")

        if max_length and len(value) > max_length:
            raise ValueError(f"Input exceeds max length of {max_length}")

        return value

    @staticmethod
    def sanitize_content(value: str, max_length: int) -> str:
        """Message body: multi-line text."""
        return InputSanitizer.sanitize_string(value, max_length=max_length, allow_newlines=True)

    @staticmethod
    def sanitize_name(value: str, max_length: int = 100) -> str:
        """Single-line display name (groups)."""
        return InputSanitizer.sanitize_string(value, max_length=max_length)
