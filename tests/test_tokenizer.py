"""Unit tests for BPETokenizer encode/decode, edge cases, batching and serialization."""

import logging
import random

import pytest

import pairtok as ptok
from pairtok._config import NUM_WORKERS_ENV, default_num_workers

from conftest import build_vocab


# Encode
# ---------------------------------------------------------------------------


def test_encode_hello_world(tokenizer):
    """Merged pre-tokens map to their vocabulary ids."""
    assert tokenizer.pretokenize("Hello, world!") == ["Hello", ",", " world", "!"]
    assert tokenizer.tokenize("Hello, world!") == ["Hello", ",", "Ġwor", "l", "d", "!"]
    assert tokenizer.encode("Hello, world!") == [262, 44, 265, 108, 100, 33]


def test_merges_do_not_cross_pretokens(tokenizer):
    """'t' and 'he' sit in different pre-tokens when separated by a contraction."""
    assert tokenizer.tokenize("t'he") == ["t", "'", "h", "e"]


def test_repetitive_text_creates_merges(tokenizer):
    text = "the the the the the"
    assert len(tokenizer.encode(text)) < len(text.encode("utf-8"))


def test_empty_string(tokenizer):
    """Empty string encodes to empty list and decodes back."""
    assert tokenizer.encode("") == []
    assert tokenizer.decode([]) == ""


# Encode-decode round-trip
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text",
    [
        "Hello, world!",
        "x",
        "   \n\t  ",
        "café naïve 日本語 🎉",
        "I'm sure they'll say we've won 1234567!",
        "\x00\x01\x02\x1b[0m\x7f\x85\xa0\xad",
        "".join(chr(c) for c in range(256)),
    ],
)
def test_roundtrip(tokenizer, text):
    """decode(encode(text)) returns the original text."""
    assert tokenizer.decode(tokenizer.encode(text)) == text


def test_roundtrip_random_bytes(tokenizer):
    """Text built from arbitrary byte sequences survives a round trip."""
    rng = random.Random(1234)
    for length in range(0, 64):
        data = bytes(rng.randrange(256) for _ in range(length))
        text = data.decode("utf-8", errors="replace")
        assert tokenizer.decode(tokenizer.encode(text)) == text


def test_roundtrip_is_idempotent(tokenizer):
    """A second round trip changes nothing, including for lone surrogates."""
    for text in ["Hello", "a\ud800b", "\udfff"]:
        once = tokenizer.decode(tokenizer.encode(text))
        assert tokenizer.decode(tokenizer.encode(once)) == once


def test_lone_surrogate_with_surrogatepass(tokenizer):
    """Lone surrogates round-trip when decoding with the matching error handler."""
    text = "a\ud800b"
    tokens = tokenizer.encode(text)
    assert tokenizer.decode(tokens) == "a���b"
    assert tokenizer.decode(tokens, errors="surrogatepass") == text


def test_decode_partial_utf8(tokenizer):
    """A lone continuation byte decodes to the replacement character by default."""
    assert tokenizer.decode([0xA9]) == "�"
    with pytest.raises(UnicodeDecodeError):
        tokenizer.decode([0xA9], errors="strict")
    assert tokenizer.decode_bytes([0xA9]) == b"\xa9"


# Decode errors
# ---------------------------------------------------------------------------


def test_decode_unknown_id_raises(tokenizer):
    """The first id without an entry is reported with its position."""
    with pytest.raises(ptok.UnknownIdError) as exc:
        tokenizer.decode([262, 99999, 100000])
    assert exc.value.token == 99999
    assert exc.value.position == 1


def test_decode_non_integer_id_raises(tokenizer):
    with pytest.raises(ptok.UnknownIdError):
        tokenizer.decode([[1]])


# Construction
# ---------------------------------------------------------------------------


def test_missing_byte_symbol_raises(toy_vocab, toy_merges):
    del toy_vocab["Ġ"]
    with pytest.raises(ptok.ConfigurationError):
        ptok.BPETokenizer(toy_vocab, toy_merges)


def test_missing_merge_product_raises(toy_vocab, toy_merges):
    del toy_vocab["Hello"]
    with pytest.raises(ptok.ConfigurationError) as exc:
        ptok.BPETokenizer(toy_vocab, toy_merges)
    assert exc.value.symbol == "Hello"


def test_symbol_outside_alphabet_raises(toy_vocab, toy_merges):
    """A raw space is not a byte symbol, so no merge could ever produce it."""
    toy_vocab["a b"] = 9000
    with pytest.raises(ptok.ConfigurationError):
        ptok.BPETokenizer(toy_vocab, toy_merges)


def test_non_contiguous_ids_allowed(toy_merges):
    vocab = {symbol: tok * 3 + 7 for symbol, tok in build_vocab(toy_merges).items()}
    tok = ptok.BPETokenizer(vocab, toy_merges)
    assert tok.decode(tok.encode("Hello there")) == "Hello there"
    assert tok.encode("Hello") == [262 * 3 + 7]


def test_special_token_entry_decodes(toy_vocab, toy_merges):
    """Vocabulary entries made of byte symbols decode even if never produced by merges."""
    toy_vocab["<|endoftext|>"] = 50256
    tok = ptok.BPETokenizer(toy_vocab, toy_merges)
    assert tok.decode([262, 50256]) == "Hello<|endoftext|>"


def test_cache_policy_by_name(toy_vocab, toy_merges):
    tok = ptok.BPETokenizer(toy_vocab, toy_merges, cache="local")
    assert isinstance(tok.cache, ptok.LocalCache)
    default = ptok.BPETokenizer(toy_vocab, toy_merges)
    assert isinstance(default.cache, ptok.LockedCache)


def test_cached_and_uncached_encodings_match(toy_vocab, toy_merges):
    text = "Hello world, the world says hello the end"
    cached = ptok.BPETokenizer(toy_vocab, toy_merges)
    uncached = ptok.BPETokenizer(toy_vocab, toy_merges, cache="none")
    assert cached.encode(text) == cached.encode(text) == uncached.encode(text)


def test_custom_pattern(toy_vocab, toy_merges):
    """A pattern that never splits lets merges span words."""
    tok = ptok.BPETokenizer(toy_vocab, toy_merges, pattern=r"(?s).+")
    assert tok.pretokenize("Hello world") == ["Hello world"]
    assert tok.decode(tok.encode("Hello world")) == "Hello world"


def test_vocab_size(tokenizer):
    assert tokenizer.vocab_size() == 266


def test_render_tokens(tokenizer):
    """Pieces are readable with control characters escaped."""
    assert tokenizer.render_tokens([262, 32, 10]) == ["Hello", " ", "\\u000a"]


def test_render_tokens_unknown_id_position(tokenizer):
    """An unknown id is reported at its index in the input."""
    with pytest.raises(ptok.UnknownIdError) as exc:
        tokenizer.render_tokens([262, 32, 99999])
    assert exc.value.token == 99999
    assert exc.value.position == 2


# Batch encode/decode
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("parallel_mode", ["off", "batch", "auto"])
def test_encode_batch_decode_batch(tokenizer, parallel_mode):
    """Batch encode and decode match single-text results."""
    texts = ["First.", "Second document.", "Third.", "Hello, world!"] * 5
    encoded = tokenizer.encode_batch(texts, num_workers=4, parallel_mode=parallel_mode)
    assert encoded == [tokenizer.encode(text) for text in texts]
    decoded = tokenizer.decode_batch(encoded, num_workers=4, parallel_mode=parallel_mode)
    assert decoded == texts


def test_batch_empty(tokenizer):
    assert tokenizer.encode_batch([]) == []
    assert tokenizer.decode_batch([]) == []


def test_batch_with_local_cache_runs_serially(toy_vocab, toy_merges, caplog):
    tok = ptok.BPETokenizer(toy_vocab, toy_merges, cache="local")
    texts = ["Hello", "world"]
    with caplog.at_level(logging.WARNING, logger="pairtok.tokenizer"):
        encoded = tok.encode_batch(texts, num_workers=2, parallel_mode="batch")
    assert encoded == [tok.encode(text) for text in texts]
    assert "not thread-safe" in caplog.text


def test_batch_decode_unknown_id_raises(tokenizer):
    with pytest.raises(ptok.UnknownIdError):
        tokenizer.decode_batch([[1, 2], [99999]], num_workers=2, parallel_mode="batch")


def test_unknown_parallel_mode_raises(tokenizer):
    with pytest.raises(ptok.OptionError):
        tokenizer.encode_batch(["a"], parallel_mode="chunk")


@pytest.mark.parametrize("parallel_mode", [None, 3])
def test_non_string_parallel_mode_raises(tokenizer, parallel_mode):
    with pytest.raises(ptok.OptionError):
        tokenizer.encode_batch(["a"], parallel_mode=parallel_mode)


def test_num_workers_env(monkeypatch):
    monkeypatch.setenv(NUM_WORKERS_ENV, "3")
    assert default_num_workers() == 3
    monkeypatch.setenv(NUM_WORKERS_ENV, "many")
    assert default_num_workers() >= 1
