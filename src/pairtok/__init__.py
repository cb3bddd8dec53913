"""pairtok: GPT-2 style byte-level BPE tokenization."""

from .alphabet import ByteAlphabet
from .cache import (
    LocalCache,
    LockedCache,
    NullCache,
    TokenCache,
    get_cache,
    list_cache_policies,
)
from .errors import (
    ConfigurationError,
    ModelLoadError,
    OptionError,
    PairTokError,
    PatternError,
    UnknownIdError,
    UnknownSymbolError,
    UnmappedSymbolError,
)
from .factory import (
    from_files,
    from_pretrained,
    get_pattern,
    list_patterns,
    load_merges,
    load_vocab,
)
from .merges import MergeTable
from .parallel import ParallelMode, list_parallel_modes
from .pattern import PreTokenizer, TokenPattern
from .tokenizer import BPETokenizer
from .vocab import VocabularyIndex

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pairtok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "BPETokenizer",
    "ByteAlphabet",
    "PreTokenizer",
    "TokenPattern",
    "MergeTable",
    "VocabularyIndex",
    "TokenCache",
    "LocalCache",
    "LockedCache",
    "NullCache",
    "ParallelMode",
    "PairTokError",
    "ConfigurationError",
    "UnknownIdError",
    "UnknownSymbolError",
    "UnmappedSymbolError",
    "PatternError",
    "OptionError",
    "ModelLoadError",
    "from_files",
    "from_pretrained",
    "load_vocab",
    "load_merges",
    "get_cache",
    "get_pattern",
    "list_patterns",
    "list_cache_policies",
    "list_parallel_modes",
]
