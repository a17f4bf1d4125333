"""
Core types for tokenization.
"""

type Token = int
type TokenPair = tuple[Token, Token]
