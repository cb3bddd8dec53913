"""
Core Byte Pair Encoding (BPE) operations.
"""

import logging

from .alphabet import ByteAlphabet
from .cache import LockedCache, TokenCache
from .merges import MergeTable
from .types import Symbol, SymbolPair

log = logging.getLogger(__name__)


def get_pairs(symbols: list[Symbol]) -> set[SymbolPair]:
    """Return the set of distinct adjacent symbol pairs."""
    return set(zip(symbols, symbols[1:]))


def merge_symbols(symbols: list[Symbol], target: SymbolPair) -> list[Symbol]:
    """
    Merge all non-overlapping occurrences of ``target`` into single symbols.

    The scan runs left to right and skips past each match, so in a run like
    ``a a a`` with target ``(a, a)`` only the leftmost pair merges.
    """
    first, second = target
    merged = first + second
    newsyms: list[Symbol] = []

    i = 0
    n = len(symbols)
    while i < n:
        # check if we can form a pair and it matches the target
        if i < n - 1 and symbols[i] == first and symbols[i + 1] == second:
            newsyms.append(merged)
            i += 2
        else:
            newsyms.append(symbols[i])
            i += 1

    return newsyms


class BPEEngine:
    """
    Applies ranked merges to one pre-token at a time.

    Results are memoized by the raw pre-token string in a ``TokenCache``.
    """

    def __init__(
        self,
        alphabet: ByteAlphabet,
        merges: MergeTable,
        cache: TokenCache | None = None,
    ) -> None:
        self.alphabet = alphabet
        self.merges = merges
        self.cache: TokenCache = LockedCache() if cache is None else cache

    def bpe(self, token: str) -> str:
        """
        Return the merged symbols of ``token`` joined by single spaces.

        :param token: A non-empty pre-token of raw text.
        """
        cached = self.cache.get(token)
        if cached is not None:
            return cached

        # lone surrogates are carried through as their 3-byte forms
        data = token.encode("utf-8", errors="surrogatepass")
        symbols = list(self.alphabet.encode(data))

        lookup = self.merges.lookup
        while len(symbols) > 1:
            best: SymbolPair | None = None
            best_rank: int | None = None
            for pair in get_pairs(symbols):
                rank = lookup(pair)
                if rank is not None and (best_rank is None or rank < best_rank):
                    best, best_rank = pair, rank

            # no adjacent pair is a merge rule
            if best is None:
                break

            symbols = merge_symbols(symbols, best)

        result = " ".join(symbols)
        self.cache.put(token, result)
        return result
