"""Regex-based byte-level tokenizer implementation."""

from typing_extensions import override
import logging

import regex as re

from .._decorators import measure_time
from ..errors import PatternError
from ..pattern import DEFAULT_PATTERN, TokenPattern
from ..trainer import train_bpe
from ..types import Token
from .base import Tokenizer

log = logging.getLogger(__name__)


class RegexTokenizer(Tokenizer):
    """Tokenizer that splits text using regex patterns before applying BPE."""

    TOKENIZER_TYPE = "regex"

    def __init__(self, pattern: str | TokenPattern | None = None) -> None:
        """
        Initialize tokenizer with a provided or default split pattern.

        The pattern must match every character of the input for encoding to
        round-trip; unmatched text is dropped. The built-in patterns cover all
        input. Lone surrogates are encoded as ``?``.

        :param pattern: Regex source or a ``TokenPattern``; defaults to GPT-4's.
        :raises PatternError: If the pattern is empty, spans lines or does not compile.
        """
        super().__init__()
        if pattern is None:
            pattern = DEFAULT_PATTERN
        elif isinstance(pattern, TokenPattern):
            pattern = pattern.value
        self.compiled_pat: re.Pattern[str] = _compile_pattern(pattern)
        self.pat = pattern

    @override
    @measure_time
    def train(
        self, text: str | list[str], vocab_size: int, verbose: bool = False
    ) -> None:
        """
        Train the tokenizer on regex-split text chunks.

        Each chunk is learned from as its own byte sequence, so no merge ever
        crosses a chunk boundary. Previous merges are discarded.

        :param text: Training text as a single string or list of strings.
        :param vocab_size: Target vocabulary size including the base 256 bytes.
        :param verbose: Log each learned merge when ``True``.
        :raises VocabularyError: If ``vocab_size`` is less than 256.
        """
        n_merges = self._check_vocab_size(vocab_size)

        # handle list input and convert text to bytes
        if isinstance(text, list):
            text = "".join(text)

        chunks = self._split_chunks(text)
        log.debug(f"training on {len(chunks)} chunks")

        result = train_bpe(chunks, n_merges, verbose=verbose)
        self._apply_training(result, n_merges)

    @override
    def encode(self, text: str) -> list[Token]:
        """
        Encode text into a sequence of tokens.

        Chunks are compressed independently and their tokens concatenated in
        order.
        """
        tokens: list[Token] = []
        for chunk_toks in self._split_chunks(text):
            tokens.extend(self._apply_bpe_chunk(chunk_toks))
        return tokens

    @override
    def _load_pattern(self, pattern: str) -> None:
        # compile before touching state so a bad pattern leaves it intact
        self.compiled_pat = _compile_pattern(pattern)
        self.pat = pattern

    def _split_chunks(self, text: str) -> list[list[Token]]:
        """
        Split text by the pattern and turn each chunk into byte tokens.

        Text the pattern does not match is dropped.
        """
        chunks = [m.group(0) for m in self.compiled_pat.finditer(text)]
        n_matched = sum(len(chunk) for chunk in chunks)
        if n_matched < len(text):
            log.debug(
                f"split pattern left {len(text) - n_matched} of {len(text)} chars unmatched"
            )
        return [list(chunk.encode("utf-8", errors="replace")) for chunk in chunks]


def _compile_pattern(pattern: str) -> re.Pattern:
    """
    Compile and validate a regex pattern.

    The pattern is stored on the first line of a model file, so it must be
    non-empty and must not contain line breaks.

    :param pattern: Regex pattern string to compile.
    :return: Compiled regex pattern.
    :raises PatternError: If pattern is invalid.
    """
    if not pattern:
        raise PatternError("split pattern must not be empty")
    if "\n" in pattern or "\r" in pattern:
        raise PatternError("split pattern must fit on one line", pattern=pattern)
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError("invalid regex pattern", pattern=pattern, regex_err=e)
