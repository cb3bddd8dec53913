"""Benchmark encode_batch() and decode_batch() of a pretrained GPT-2 style tokenizer.

Outputs a markdown row with the columns:
  Corpus Size | Vocab Size | Cache | Encoding Throughput |
  Decoding Throughput | Compression Ratio | Size Reduction
"""

import argparse
import time
from pathlib import Path

from pairtok import from_pretrained, list_cache_policies

HF_DATASET = "stevez80/Sci-Fi-Books-gutenberg"


def load_corpus(files: list[str], num_docs: int | None) -> list[str]:
    """Read local text files, or up to `num_docs` documents of the default dataset."""
    if files:
        docs = [Path(f).read_text(encoding="utf-8") for f in files]
        return docs[:num_docs] if num_docs is not None else docs

    from datasets import load_dataset

    print(f"Loading {HF_DATASET} (non-streaming) …")
    ds = load_dataset(HF_DATASET, split="train")
    if num_docs is not None:
        return ds[:num_docs]["text"]
    return ds["text"]


def main() -> None:
    """Run the encode/decode benchmark and print a markdown row."""
    parser = argparse.ArgumentParser(
        description="Benchmark pairtok encode_batch() and decode_batch()."
    )
    parser.add_argument(
        "model_dir",
        type=str,
        help="Directory holding encoder.json and vocab.bpe.",
    )
    parser.add_argument(
        "--corpus",
        nargs="*",
        default=[],
        help="Text files to encode (default: the Sci-Fi Gutenberg dataset).",
    )
    parser.add_argument(
        "--num-docs",
        type=int,
        default=None,
        help="Number of documents to encode (default: all).",
    )
    parser.add_argument(
        "--cache",
        choices=list_cache_policies(),
        default="locked",
        help="Cache policy for BPE results (default: locked).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads (default: PAIRTOK_NUM_WORKERS or CPU count).",
    )
    args = parser.parse_args()

    docs = load_corpus(args.corpus, args.num_docs)
    if not docs:
        raise RuntimeError("No documents loaded.")

    total_bytes = sum(len(d.encode("utf-8")) for d in docs)
    corpus_mb = total_bytes / (1024 * 1024)

    tokenizer = from_pretrained(args.model_dir, cache=args.cache)

    # --- Encoding ---
    t0 = time.perf_counter()
    encoded: list[list[int]] = tokenizer.encode_batch(docs, num_workers=args.workers)
    encode_elapsed = time.perf_counter() - t0
    encode_mbps = total_bytes / encode_elapsed / (1024 * 1024)

    # --- Decoding ---
    t0 = time.perf_counter()
    tokenizer.decode_batch(encoded, num_workers=args.workers)
    decode_elapsed = time.perf_counter() - t0
    total_tokens = sum(len(seq) for seq in encoded)
    decode_mtps = total_tokens / decode_elapsed / 1_000_000

    # --- Compression stats ---
    compression_ratio = total_bytes / total_tokens
    size_reduction = (1 - 1 / compression_ratio) * 100

    # --- Output ---
    print()
    header = (
        f"| {'Corpus Size':12} | {'Vocab Size':10} | {'Cache':6} "
        f"| {'Encoding Throughput':19} | {'Decoding Throughput':19} "
        f"| {'Compression Ratio':17} | {'Size Reduction':14} |"
    )
    sep = (
        f"| {'-' * 12} | {'-' * 10} | {'-' * 6} "
        f"| {'-' * 19} | {'-' * 19} "
        f"| {'-' * 17} | {'-' * 14} |"
    )
    row = (
        f"| {f'{corpus_mb:.2f} MB':12} | {tokenizer.vocab_size():10,} | {args.cache:6} "
        f"| {f'{encode_mbps:.2f} MB/sec':19} | {f'{decode_mtps:.1f}M tokens/sec':19} "
        f"| {f'{compression_ratio:.2f}x':17} | {f'{size_reduction:.1f}%':14} |"
    )
    print(header)
    print(sep)
    print(row)
    print()


if __name__ == "__main__":
    main()
