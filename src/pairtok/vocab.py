"""Bidirectional symbol <-> id index."""

import logging
from types import MappingProxyType
from typing import Mapping

from .errors import ConfigurationError, UnknownIdError, UnknownSymbolError
from .types import Symbol, Token

log = logging.getLogger(__name__)


class VocabularyIndex:
    """
    Immutable bijection between vocabulary symbols and integer ids.

    Ids need not be contiguous.
    """

    def __init__(self, vocab: Mapping[Symbol, Token]) -> None:
        """
        Index ``vocab`` in both directions.

        :raises ConfigurationError: If an id is negative or shared by two symbols.
        """
        decoder: dict[Token, Symbol] = {}
        for symbol, tok in vocab.items():
            if tok < 0:
                raise ConfigurationError("token ids must be non-negative", symbol=symbol, token=tok)
            if tok in decoder:
                raise ConfigurationError(
                    f"id already assigned to {decoder[tok]!r}", symbol=symbol, token=tok
                )
            decoder[tok] = symbol

        self._encoder: Mapping[Symbol, Token] = MappingProxyType(dict(vocab))
        self._decoder: Mapping[Token, Symbol] = MappingProxyType(decoder)
        log.debug(f"indexed vocabulary with {len(decoder)} entries")

    def id_of(self, symbol: Symbol) -> Token:
        """
        Return the id of ``symbol``.

        :raises UnknownSymbolError: If the symbol has no id.
        """
        try:
            return self._encoder[symbol]
        except KeyError:
            raise UnknownSymbolError(symbol) from None

    def symbol_of(self, tok: Token, position: int | None = None) -> Symbol:
        """
        Return the symbol for id ``tok``.

        :param position: Index of ``tok`` in the caller's sequence, reported on failure.
        :raises UnknownIdError: If the id has no entry.
        """
        try:
            return self._decoder[tok]
        except (KeyError, TypeError):
            raise UnknownIdError(tok, position=position) from None

    def items(self) -> list[tuple[Symbol, Token]]:
        """Return ``(symbol, id)`` pairs ordered by id."""
        return [(symbol, tok) for tok, symbol in sorted(self._decoder.items())]

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._encoder

    def __len__(self) -> int:
        return len(self._encoder)
