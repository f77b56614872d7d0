"""bpetok: byte-level byte pair encoding tokenizers."""

from importlib.metadata import PackageNotFoundError, version

from .errors import (
    BpeTokError,
    ModelLoadError,
    PatternError,
    UnknownTokenizerError,
    VocabularyError,
)
from .factory import from_pretrained, get_tokenizer, list_tokenizers
from .pattern import TokenPattern, get_pattern, list_patterns
from .tokenizers import BasicTokenizer, RegexTokenizer, Tokenizer

try:
    __version__ = version("bpetok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "Tokenizer",
    "BasicTokenizer",
    "RegexTokenizer",
    "TokenPattern",
    "BpeTokError",
    "ModelLoadError",
    "PatternError",
    "UnknownTokenizerError",
    "VocabularyError",
    "get_tokenizer",
    "get_pattern",
    "from_pretrained",
    "list_patterns",
    "list_tokenizers",
]
