"""Basic byte-level tokenizer implementation."""

from typing_extensions import override
import logging

from .._decorators import measure_time
from ..trainer import train_bpe
from ..types import Token
from .base import Tokenizer

log = logging.getLogger(__name__)


class BasicTokenizer(Tokenizer):
    """
    Tokenizer that operates directly on byte sequences without regex splitting
    """

    TOKENIZER_TYPE = "basic"

    def __init__(self) -> None:
        """Initialize a basic byte-level tokenizer."""
        super().__init__()

    @override
    @measure_time
    def train(
        self, text: str | list[str], vocab_size: int, verbose: bool = False
    ) -> None:
        """
        Train the tokenizer on raw text using byte-level BPE.

        This implementation concatenates list inputs, encodes text as UTF-8
        bytes, and learns up to ``vocab_size - 256`` merges on top of the base
        byte vocabulary. Previous merges are discarded.

        :param text: Training text as a single string or list of strings.
        :param vocab_size: Target vocabulary size including the base 256 bytes.
        :param verbose: Log each learned merge when ``True``.
        :raises VocabularyError: If ``vocab_size`` is less than 256.
        """
        n_merges = self._check_vocab_size(vocab_size)

        # handle list input and convert text to bytes
        if isinstance(text, list):
            text = "".join(text)

        tokens = list(text.encode("utf-8", errors="replace"))
        log.debug(f"training on {len(tokens)} bytes")

        result = train_bpe([tokens], n_merges, verbose=verbose)
        self._apply_training(result, n_merges)

    @override
    def encode(self, text: str) -> list[Token]:
        """
        Encode text into a sequence of tokens.

        Lone surrogates cannot be UTF-8 encoded and become ``?``.
        """
        # encode Unicode text into bytes
        txt_bytes = text.encode("utf-8", errors="replace")
        # return bpe of [0-255] byte tokens
        return self._apply_bpe_chunk(list(txt_bytes))
