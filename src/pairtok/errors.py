"""Custom exception hierarchy for pairtok tokenization errors."""

import regex as re

from ._sanitise import escape_ctrl_chars
from .types import Symbol, Token


class PairTokError(Exception):
    """Base exception for all pairtok errors."""


class ConfigurationError(PairTokError):
    """Raised when the vocabulary and merge table cannot form a valid tokenizer."""

    def __init__(
        self,
        message: str,
        *,
        symbol: Symbol | None = None,
        token: Token | None = None,
    ) -> None:
        """Initialize with the offending symbol and/or id appended to the message."""
        extra = " "
        if symbol is not None:
            extra += f"(symbol: {escape_ctrl_chars(symbol)!r}) "
        if token is not None:
            extra += f"(id: {token}) "
        super().__init__(message + extra)
        self.symbol = symbol
        self.token = token


class UnknownIdError(PairTokError):
    """Raised when decoding meets an id that has no vocabulary entry."""

    def __init__(self, token: Token, *, position: int | None = None) -> None:
        message = f"token id not found in vocabulary: {token}"
        if position is not None:
            message += f" (position: {position})"
        super().__init__(message)
        self.token = token
        self.position = position


class UnknownSymbolError(PairTokError):
    """
    Raised when a merged symbol has no vocabulary id.

    This means the vocabulary and merge table were not built together.
    """

    def __init__(self, symbol: Symbol) -> None:
        super().__init__(f"symbol not found in vocabulary: {escape_ctrl_chars(symbol)!r}")
        self.symbol = symbol


class UnmappedSymbolError(PairTokError):
    """Raised when a value falls outside the byte alphabet."""

    def __init__(self, symbol: Symbol | int) -> None:
        if isinstance(symbol, int):
            message = f"byte value out of range: {symbol}"
        else:
            message = f"symbol is not part of the byte alphabet: {escape_ctrl_chars(symbol)!r}"
        super().__init__(message)
        self.symbol = symbol


class PatternError(PairTokError):
    """Raised when compiling and/or validating regex patterns."""

    def __init__(
        self,
        message: str,
        *,
        pattern: str | None = None,
        regex_err: re.error | None = None,
    ) -> None:
        """
        Initialize PatternError with pattern details.

        :param message: Error message.
        :param pattern: The regex pattern that failed.
        :param regex_err: The underlying regex error from the regex library.
        """
        extra = " "
        if pattern:
            extra += f"(pattern: {pattern!r}) "
        if regex_err:
            extra += f"(reason: {regex_err}) "
        super().__init__(message + extra)
        self.pattern = pattern
        self.regex_err = regex_err


class OptionError(PairTokError):
    """Raised when an unknown cache policy or parallel mode is requested."""

    def __init__(
        self,
        message: str,
        *,
        invalid_name: str | None = None,
        available: list[str] | None = None,
    ) -> None:
        extra = " "
        if invalid_name:
            extra += f"(available: {available}) (got {invalid_name}) "
        super().__init__(message + extra)
        self.invalid_name = invalid_name
        self.available = available


class ModelLoadError(PairTokError):
    """Raised when loading tokenizer files fails."""

    def __init__(
        self,
        message: str,
        *,
        model_path: str | None = None,
        line_no: int | None = None,
    ) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        if line_no is not None:
            extra += f"(line: {line_no}) "
        super().__init__(message + extra)
        self.model_path = model_path
        self.line_no = line_no
