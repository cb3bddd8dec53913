"""
Reversible mapping between raw bytes and printable surrogate characters.

BPE merges operate on strings, so every byte 0-255 is given a visible
stand-in character. Bytes that already print as a single Latin-1 glyph keep
their own code point; the rest (control bytes, space, soft hyphen, ...) are
shifted to code points starting at 256. This is the GPT-2 byte encoder.
"""

import functools
from types import MappingProxyType
from typing import Mapping

from .errors import UnmappedSymbolError
from .types import Symbol


N_BYTES = 256


@functools.cache
def _byte_table() -> tuple[Symbol, ...]:
    """Return the surrogate symbol of every byte, indexed by byte value."""
    printable = [
        *range(ord("!"), ord("~") + 1),
        *range(ord("¡"), ord("¬") + 1),
        *range(ord("®"), ord("ÿ") + 1),
    ]
    keep = set(printable)

    table: list[Symbol] = []
    n = 0
    for b in range(N_BYTES):
        if b in keep:
            table.append(chr(b))
        else:
            # unprintable bytes get fresh code points in ascending byte order
            table.append(chr(N_BYTES + n))
            n += 1
    return tuple(table)


class ByteAlphabet:
    """Bijection between byte values and their surrogate symbols."""

    def __init__(self, byte_to_symbol: tuple[Symbol, ...]) -> None:
        self._encoder = byte_to_symbol
        self._decoder: Mapping[Symbol, int] = MappingProxyType(
            {sym: b for b, sym in enumerate(byte_to_symbol)}
        )

    @classmethod
    def build(cls) -> "ByteAlphabet":
        """Build the standard GPT-2 byte alphabet."""
        return cls(_byte_table())

    def byte_to_symbol(self, b: int) -> Symbol:
        """Return the surrogate symbol for byte value ``b``."""
        if not 0 <= b < N_BYTES:
            raise UnmappedSymbolError(b)
        return self._encoder[b]

    def symbol_to_byte(self, symbol: Symbol) -> int:
        """
        Return the byte value a surrogate symbol stands for.

        :raises UnmappedSymbolError: If ``symbol`` is not one of the 256 alphabet symbols.
        """
        try:
            return self._decoder[symbol]
        except KeyError:
            raise UnmappedSymbolError(symbol) from None

    def encode(self, data: bytes) -> str:
        """Map every byte of ``data`` to its surrogate symbol."""
        encoder = self._encoder
        return "".join(encoder[b] for b in data)

    def decode(self, symbols: str) -> bytes:
        """Map a string of surrogate symbols back to the bytes it stands for."""
        decoder = self._decoder
        try:
            return bytes(decoder[c] for c in symbols)
        except KeyError as e:
            raise UnmappedSymbolError(e.args[0]) from None

    def symbols(self) -> tuple[Symbol, ...]:
        """Return all surrogate symbols ordered by byte value."""
        return self._encoder

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._decoder

    def __len__(self) -> int:
        return len(self._encoder)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ByteAlphabet):
            return NotImplemented
        return self._encoder == other._encoder

    def __hash__(self) -> int:
        return hash(self._encoder)
