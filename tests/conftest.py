"""Shared fixtures: a small hand-built vocabulary and merge table."""

import pytest

import pairtok as ptok


TOY_MERGES = [
    ("t", "h"),
    ("th", "e"),
    ("Ġ", "the"),
    ("l", "l"),
    ("e", "ll"),
    ("H", "ell"),
    ("Hell", "o"),
    ("Ġ", "w"),
    ("o", "r"),
    ("Ġw", "or"),
]


def build_vocab(merges):
    """Byte symbols take ids 0-255 by byte value, merge products follow in rank order."""
    alphabet = ptok.ByteAlphabet.build()
    vocab = {alphabet.byte_to_symbol(b): b for b in range(256)}
    for first, second in merges:
        vocab.setdefault(first + second, len(vocab))
    return vocab


@pytest.fixture
def alphabet():
    """Return the standard byte alphabet."""
    return ptok.ByteAlphabet.build()


@pytest.fixture
def toy_merges():
    return list(TOY_MERGES)


@pytest.fixture
def toy_vocab():
    return build_vocab(TOY_MERGES)


@pytest.fixture
def tokenizer(toy_vocab, toy_merges):
    """Return a tokenizer over the toy vocabulary."""
    return ptok.BPETokenizer(toy_vocab, toy_merges)
