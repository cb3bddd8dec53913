"""Ordered merge rules and their ranks."""

import logging
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from .errors import ConfigurationError
from .types import SymbolPair

log = logging.getLogger(__name__)


class MergeTable:
    """
    Immutable ``pair -> rank`` table.

    The rank of a rule is its position in the list it was loaded from; lower
    ranks are merged first.
    """

    def __init__(self, ranks: Mapping[SymbolPair, int]) -> None:
        if len(set(ranks.values())) != len(ranks):
            raise ConfigurationError("merge ranks must be unique")
        # keep iteration in rank order
        ordered = dict(sorted(ranks.items(), key=lambda x: x[1]))
        self._ranks: Mapping[SymbolPair, int] = MappingProxyType(ordered)

    @classmethod
    def load(cls, ordered_pairs: Iterable[SymbolPair]) -> "MergeTable":
        """
        Assign ranks to merge rules in the order given.

        :param ordered_pairs: Symbol pairs, highest priority first.
        :raises ConfigurationError: If a pair occurs more than once.
        """
        ranks: dict[SymbolPair, int] = {}
        for rank, (first, second) in enumerate(ordered_pairs):
            pair = (first, second)
            if pair in ranks:
                raise ConfigurationError(
                    f"duplicate merge rule at rank {rank} (first seen at rank {ranks[pair]})",
                    symbol=first + second,
                )
            ranks[pair] = rank

        log.debug(f"loaded {len(ranks)} merge rules")
        return cls(ranks)

    def lookup(self, pair: SymbolPair) -> int | None:
        """Return the rank of ``pair`` or ``None`` if it is not a merge rule."""
        return self._ranks.get(pair)

    def pairs(self) -> list[SymbolPair]:
        """Return all merge rules in rank order."""
        return list(self._ranks)

    def __iter__(self) -> Iterator[SymbolPair]:
        return iter(self._ranks)

    def __contains__(self, pair: object) -> bool:
        return pair in self._ranks

    def __len__(self) -> int:
        return len(self._ranks)
