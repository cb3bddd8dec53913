"""Factory functions for loading tokenizers from disk."""

import json
import logging
from pathlib import Path
from typing import Any

from ._decorators import measure_time
from .errors import ModelLoadError
from .pattern import TokenPattern
from .tokenizer import MERGES_FILENAME, VOCAB_FILENAME, BPETokenizer
from .types import SymbolPair, Vocabulary

log = logging.getLogger(__name__)


def list_patterns() -> list[str]:
    """Return names of all available built-in tokenization patterns."""
    return [pat.name for pat in TokenPattern]


def get_pattern(name: str) -> str:
    """Return the regex of a built-in pattern by name (e.g. "gpt2")."""
    return TokenPattern.get(name)


def _require_file(path: Path) -> None:
    if not path.is_file():
        raise ModelLoadError("file does not exist", model_path=str(path))


def load_vocab(path: str | Path) -> Vocabulary:
    """
    Read an ``encoder.json`` vocabulary: a JSON object of symbol -> id.

    :raises ModelLoadError: If the file is missing, not JSON, or not a
        mapping of strings to integers.
    """
    path = Path(path)
    _require_file(path)

    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ModelLoadError(
                f"invalid JSON: {e.msg}", model_path=str(path), line_no=e.lineno
            ) from e

    if not isinstance(data, dict):
        raise ModelLoadError("vocabulary must be a JSON object", model_path=str(path))

    vocab: Vocabulary = {}
    for symbol, tok in data.items():
        # bool is an int subclass but never a valid id
        if not isinstance(tok, int) or isinstance(tok, bool):
            raise ModelLoadError(
                f"token id is not an integer: {symbol!r} -> {tok!r}", model_path=str(path)
            )
        vocab[symbol] = tok

    log.debug(f"read {len(vocab)} vocabulary entries from {path}")
    return vocab


def load_merges(path: str | Path) -> list[SymbolPair]:
    """
    Read a ``vocab.bpe`` merge list.

    A first line starting with ``#version`` and blank lines are skipped;
    every other line holds two space-separated symbols.

    :raises ModelLoadError: If the file is missing or a line is malformed.
    """
    path = Path(path)
    _require_file(path)

    merges: list[SymbolPair] = []
    with path.open("r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.rstrip("\r\n")
            # "#" is a byte symbol, so only the leading version header is skipped
            if not line or (line_no == 1 and line.startswith("#version")):
                continue
            parts = line.split(" ")
            if len(parts) != 2 or not all(parts):
                raise ModelLoadError(
                    f"merge rule must be two space-separated symbols: {line!r}",
                    model_path=str(path),
                    line_no=line_no,
                )
            merges.append((parts[0], parts[1]))

    log.debug(f"read {len(merges)} merge rules from {path}")
    return merges


@measure_time
def from_files(
    vocab_path: str | Path, merges_path: str | Path, **kwargs: Any
) -> BPETokenizer:
    """
    Build a tokenizer from an ``encoder.json`` and a ``vocab.bpe`` file.

    Extra keyword arguments (``pattern``, ``cache``) go to ``BPETokenizer``.

    :raises ModelLoadError: If either file cannot be read.
    :raises ConfigurationError: If the files do not form a valid tokenizer.
    """
    log.info(f"loading tokenizer from {vocab_path} and {merges_path}")
    tokenizer = BPETokenizer(load_vocab(vocab_path), load_merges(merges_path), **kwargs)
    log.info(
        f"tokenizer loaded successfully: {tokenizer.vocab_size()} tokens, "
        f"{len(tokenizer.merges)} merge rules"
    )
    return tokenizer


def from_pretrained(directory: str | Path, **kwargs: Any) -> BPETokenizer:
    """
    Load a tokenizer from a directory holding ``encoder.json`` and ``vocab.bpe``.

    .. code-block:: python

        tokenizer = from_pretrained("models/gpt2")
        tokens = tokenizer.encode("Hello world")
    """
    path = Path(directory)
    if not path.is_dir():
        raise ModelLoadError("model directory does not exist", model_path=str(path))
    return from_files(path / VOCAB_FILENAME, path / MERGES_FILENAME, **kwargs)
