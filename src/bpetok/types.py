"""
Core types for tokenization.
"""

from typing import TypeAlias

Token: TypeAlias = int
TokenBytes: TypeAlias = bytes
TokenPair: TypeAlias = tuple[Token, Token]
Encoding: TypeAlias = dict[TokenPair, Token]
Vocabulary: TypeAlias = dict[Token, TokenBytes]
