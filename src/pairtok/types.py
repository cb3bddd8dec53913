"""
Core types for tokenization.
"""

type Token = int
type Symbol = str
type SymbolPair = tuple[Symbol, Symbol]
type Vocabulary = dict[Symbol, Token]
