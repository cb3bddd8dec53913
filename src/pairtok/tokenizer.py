"""
Byte-level BPE tokenizer: text <-> token ids.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from math import ceil
from pathlib import Path
from typing import Callable, Iterable, Mapping, TypeVar

from ._bpe import BPEEngine
from ._config import default_num_workers
from ._sanitise import render_bytes
from .alphabet import ByteAlphabet
from .cache import CachePolicy, TokenCache, get_cache
from .errors import ConfigurationError
from .merges import MergeTable
from .parallel import ParallelMode, ParallelStrategy
from .pattern import PreTokenizer
from .types import Symbol, SymbolPair, Token
from .vocab import VocabularyIndex

VOCAB_FILENAME = "encoder.json"
MERGES_FILENAME = "vocab.bpe"
MERGES_HEADER = "#version: 0.2"

log = logging.getLogger(__name__)

_T = TypeVar("_T")
_R = TypeVar("_R")


class BPETokenizer:
    """
    GPT-2 style byte-level BPE tokenizer.

    Encoding splits text into pre-tokens, maps each UTF-8 byte to a printable
    surrogate symbol, applies ranked merges inside every pre-token and looks
    up the id of each resulting symbol. Decoding reverses those steps, so any
    well-formed string survives ``decode(encode(text))`` unchanged.

    Merge results are cached per raw pre-token. The default ``"locked"`` cache
    lets one instance be shared between threads; pass ``cache="local"`` for a
    lock-free cache when each thread owns its own tokenizer.

    .. code-block:: python

        tok = BPETokenizer(vocab, merges)
        ids = tok.encode("Hello, world!")
        assert tok.decode(ids) == "Hello, world!"
    """

    def __init__(
        self,
        vocab: Mapping[Symbol, Token] | VocabularyIndex,
        merges: Iterable[SymbolPair] | MergeTable,
        pattern: str | None = None,
        cache: TokenCache | CachePolicy | None = None,
    ) -> None:
        """
        Build a tokenizer from a vocabulary and ordered merge rules.

        :param vocab: Mapping from symbol to id, or a prepared index.
        :param merges: Merge rules in rank order, or a prepared table.
        :param pattern: Pre-tokenization regex; GPT-2's pattern when omitted.
        :param cache: A cache instance or policy name ("locked", "local", "none").
        :raises ConfigurationError: If the vocabulary cannot cover every symbol
            the alphabet and merge table produce.
        :raises PatternError: If ``pattern`` is not a valid regex.
        """
        self.alphabet = ByteAlphabet.build()
        self.vocab = vocab if isinstance(vocab, VocabularyIndex) else VocabularyIndex(vocab)
        self.merges = merges if isinstance(merges, MergeTable) else MergeTable.load(merges)
        self.pretokenizer = PreTokenizer(pattern)

        if cache is None:
            cache = get_cache("locked")
        elif isinstance(cache, str):
            cache = get_cache(cache)
        self.engine = BPEEngine(self.alphabet, self.merges, cache)

        self._validate()
        log.debug(
            f"tokenizer ready: {len(self.vocab)} vocabulary entries, "
            f"{len(self.merges)} merge rules, {type(cache).__name__}"
        )

    @property
    def pattern(self) -> str:
        """Return the pre-tokenization regex."""
        return self.pretokenizer.pat

    @property
    def cache(self) -> TokenCache:
        return self.engine.cache

    def vocab_size(self) -> int:
        """Return the number of tokens in the vocabulary."""
        return len(self.vocab)

    def pretokenize(self, text: str) -> list[str]:
        """Split ``text`` into the spans that are encoded independently."""
        return list(self.pretokenizer.split(text))

    def bpe(self, token: str) -> str:
        """Return the space-joined merged symbols of one pre-token."""
        return self.engine.bpe(token)

    def tokenize(self, text: str) -> list[Symbol]:
        """Return the vocabulary symbols ``encode`` maps to ids."""
        symbols: list[Symbol] = []
        for chunk in self.pretokenizer.split(text):
            symbols.extend(self.engine.bpe(chunk).split(" "))
        return symbols

    def encode(self, text: str) -> list[Token]:
        """
        Encode text into a sequence of token ids.

        :raises UnknownSymbolError: If a merged symbol has no id. This only
            happens when the vocabulary and merges were not built together.
        """
        id_of = self.vocab.id_of
        return [id_of(symbol) for symbol in self.tokenize(text)]

    def decode(self, tokens: Iterable[Token], errors: str = "replace") -> str:
        """
        Decode a sequence of token ids back into text.

        :param errors: How to handle invalid UTF-8 in arbitrary id sequences;
            any ``bytes.decode`` error handler ("replace", "strict", ...).
        :raises UnknownIdError: On the first id that has no vocabulary entry.
        """
        return self.decode_bytes(tokens).decode("utf-8", errors=errors)

    def decode_bytes(self, tokens: Iterable[Token]) -> bytes:
        """Decode token ids into the raw bytes they stand for."""
        symbol_of = self.vocab.symbol_of
        symbols = "".join(symbol_of(tok, pos) for pos, tok in enumerate(tokens))
        return self.alphabet.decode(symbols)

    def render_tokens(self, tokens: Iterable[Token]) -> list[str]:
        """
        Return a printable piece of text for each token id.

        Control characters are escaped and bytes of partial UTF-8 sequences
        show up as the replacement character.
        """
        symbol_of = self.vocab.symbol_of
        return [
            render_bytes(self.alphabet.decode(symbol_of(tok, pos)))
            for pos, tok in enumerate(tokens)
        ]

    def encode_batch(
        self,
        texts: list[str],
        num_workers: int | None = None,
        parallel_mode: ParallelStrategy | ParallelMode = "auto",
    ) -> list[list[Token]]:
        """
        Encode many texts, optionally spread over a thread pool.

        :param texts: Text inputs to encode.
        :param num_workers: Worker count; ``PAIRTOK_NUM_WORKERS`` or the CPU count when omitted.
        :param parallel_mode: "off", "batch" or "auto" (batch for more than one text).
        :returns: Encoded token sequences in input order.
        """
        return self._map_batch(self.encode, texts, num_workers, parallel_mode)

    def decode_batch(
        self,
        token_batch: list[list[Token]],
        errors: str = "replace",
        num_workers: int | None = None,
        parallel_mode: ParallelStrategy | ParallelMode = "auto",
    ) -> list[str]:
        """
        Decode many token sequences, optionally spread over a thread pool.

        :raises UnknownIdError: If any sequence contains an unknown id.
        """

        def decode_one(tokens: list[Token]) -> str:
            return self.decode(tokens, errors=errors)

        return self._map_batch(decode_one, token_batch, num_workers, parallel_mode)

    def save(self, directory: str | Path) -> None:
        """
        Write ``encoder.json`` and ``vocab.bpe`` into ``directory``.

        The files can be read back with ``pairtok.from_pretrained``.
        """
        path = Path(directory)
        path.mkdir(parents=True, exist_ok=True)
        log.info(f"saving tokenizer to {path}")

        with (path / VOCAB_FILENAME).open("w", encoding="utf-8") as f:
            json.dump(dict(self.vocab.items()), f, ensure_ascii=False)

        with (path / MERGES_FILENAME).open("w", encoding="utf-8", newline="\n") as f:
            f.write(f"{MERGES_HEADER}\n")
            for first, second in self.merges:
                f.write(f"{first} {second}\n")

        log.info("tokenizer saved successfully")

    def _map_batch(
        self,
        func: Callable[[_T], _R],
        items: list[_T],
        num_workers: int | None,
        parallel_mode: ParallelStrategy | ParallelMode,
    ) -> list[_R]:
        """Apply ``func`` to every item serially or across worker threads."""
        mode = ParallelMode.get(parallel_mode)
        if not items:
            return []

        if num_workers is None:
            workers = default_num_workers()
        else:
            workers = max(1, num_workers)  # "0" interpreted as 1 worker

        match mode:
            case ParallelMode.OFF:
                return [func(item) for item in items]
            case ParallelMode.AUTO if len(items) <= 1:
                return [func(item) for item in items]

        if workers == 1:
            return [func(item) for item in items]

        if not self.cache.thread_safe:
            log.warning(
                f"{type(self.cache).__name__} is not thread-safe, running batch serially"
            )
            return [func(item) for item in items]

        # group items to reduce task-scheduling overhead for many small inputs
        target_tasks = min(len(items), workers * 2)
        group_size = max(1, ceil(len(items) / target_tasks))
        groups = [items[idx : idx + group_size] for idx in range(0, len(items), group_size)]

        def run_group(group: list[_T]) -> list[_R]:
            return [func(item) for item in group]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(run_group, groups))
        return [out for group in results for out in group]

    def _validate(self) -> None:
        """Check the vocabulary covers the alphabet and every merge product."""
        vocab = self.vocab

        for symbol in self.alphabet.symbols():
            if symbol not in vocab:
                raise ConfigurationError("vocabulary has no id for byte symbol", symbol=symbol)

        for first, second in self.merges:
            if first + second not in vocab:
                raise ConfigurationError(
                    "vocabulary has no id for merge product", symbol=first + second
                )

        alphabet = self.alphabet
        for symbol, tok in vocab.items():
            if not symbol or any(c not in alphabet for c in symbol):
                raise ConfigurationError(
                    "vocabulary symbol is not made of byte symbols", symbol=symbol, token=tok
                )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(vocab_size={len(self.vocab)}, "
            f"merges={len(self.merges)})"
        )
