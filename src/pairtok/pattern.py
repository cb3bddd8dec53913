"""Pre-tokenization: splitting text into spans that BPE never merges across."""

from enum import Enum
from typing import Iterator

import regex as re

from .errors import PatternError


class TokenPattern(str, Enum):
    """
    Pre-defined split patterns.

    Alternatives are tried left to right at every scan position, so
    contractions win over letter runs, and a whitespace run in front of a
    word gives up its last space to that word.

    Source: https://github.com/openai/tiktoken/blob/main/tiktoken_ext/openai_public.py
    """

    GPT2 = (
        r"'s|'t|'re|'ve|'m|'ll|'d|"
        r" ?\p{L}+|"
        r" ?\p{N}+|"
        r" ?[^\s\p{L}\p{N}]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    GPT4 = (
        r"'(?i:[sdmt]|ll|ve|re)|"
        r"[^\r\n\p{L}\p{N}]?+\p{L}+|"
        r"\p{N}{1,3}|"
        r" ?[^\s\p{L}\p{N}]++[\r\n]*|"
        r"\s*[\r\n]|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    @classmethod
    def get(cls, name: str) -> str:
        """Get patterns by name (case-insensitive)."""
        try:
            return cls[name.upper().replace("-", "_")].value
        except KeyError:
            raise PatternError(
                f"Unknown pattern: {name!r}. "
                f"Valid patterns: {', '.join(pat.name for pat in cls)}"
            ) from None


class PreTokenizer:
    """Split text into ordered, non-overlapping pre-tokens."""

    def __init__(self, pattern: str | None = None) -> None:
        """Compile ``pattern``; the GPT-2 pattern is used when omitted."""
        self.pat: str = TokenPattern.GPT2.value if pattern is None else pattern
        self.compiled_pat: re.Pattern[str] = _compile_pattern(self.pat)

    def split(self, text: str) -> Iterator[str]:
        """Lazily yield the pre-tokens of ``text`` in order."""
        for m in self.compiled_pat.finditer(text):
            chunk = m.group(0)
            # zero-width matches from custom patterns carry no text
            if chunk:
                yield chunk

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.pat!r})"


def _compile_pattern(pattern: str) -> re.Pattern:
    """
    Compile and validate a regex pattern.

    :param pattern: Regex pattern string to compile.
    :return: Compiled regex pattern.
    :raises PatternError: If pattern is invalid.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError("invalid regex pattern", pattern=pattern, regex_err=e)
