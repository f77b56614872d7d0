"""
Base tokenizer interface for byte-level tokenization implementations.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Final

from .._bpe import BASE_VOCAB_SIZE, bpe_merge, build_vocab
from .._sanitise import render_bytes
from ..errors import ModelLoadError, VocabularyError
from ..trainer import BPETrainingResult
from ..types import Encoding, Token, TokenPair, Vocabulary

MODEL_SUFFIX: Final[str] = ".model"
VOCAB_SUFFIX: Final[str] = ".vocab"

log = logging.getLogger(__name__)


class Tokenizer(ABC):
    """
    Abstract base class for byte-level tokenizers.

    Owns the merge table, the vocabulary derived from it and the split
    pattern, and provides decoding and serialization.
    """

    TOKENIZER_TYPE: str = "base"

    def __init__(self) -> None:
        """Initialize tokenizer with base 256 vocabulary."""
        super().__init__()
        # byte pair -> merge token, insertion order is merge priority
        self.merges: Encoding = {}
        # regex pattern for splitting text, empty when text is not split
        self.pat: str = ""
        # tokens -> bytes
        self.vocab: Vocabulary = build_vocab(self.merges)

    @abstractmethod
    def train(
        self, text: str | list[str], vocab_size: int, verbose: bool = False
    ) -> None:
        """Train tokenizer on text to learn merges up to target vocab size."""
        ...

    @abstractmethod
    def encode(self, text: str) -> list[Token]:
        """Encode text into a sequence of tokens."""
        ...

    def decode(self, tokens: list[Token], errors: str | None = None) -> str:
        """
        Decode a sequence of tokens back into text.

        Tokens missing from the vocabulary are skipped. With ``errors=None``
        an invalid UTF-8 result does not raise; a message describing the
        failure is returned in place of the text.

        :param tokens: Token sequence to decode.
        :param errors: Optional codec error handler ("strict", "replace", ...)
            passed to ``bytes.decode``.
        """
        txt_bytes = self.decode_bytes(tokens)
        if errors is not None:
            return txt_bytes.decode("utf-8", errors=errors)
        try:
            return txt_bytes.decode("utf-8")
        except UnicodeDecodeError as e:
            log.warning(f"decoded bytes are not valid utf-8: {e}")
            return f"invalid utf-8 sequence: {e}"

    def decode_bytes(self, tokens: list[Token]) -> bytes:
        """Concatenate the bytes of every known token in ``tokens``."""
        unknown = [tok for tok in tokens if tok not in self.vocab]
        if unknown:
            log.debug(f"skipping {len(unknown)} tokens not in vocabulary")
        return b"".join(self.vocab[tok] for tok in tokens if tok in self.vocab)

    def vocab_size(self) -> int:
        """Return the number of tokens in the vocabulary."""
        return len(self.vocab)

    def save(self, file_prefix: str) -> None:
        """
        Save tokenizer state to disk.

        Creates two files: a .model file with the split pattern and merge
        pairs, and a .vocab file with human-readable token representations.

        :param file_prefix: Path prefix for output files.
        """
        log.info(f"saving tokenizer to {file_prefix}")

        # write split pattern + merge pairs for loading model in future
        self._save_model(file_prefix)

        # write token -> text vocabulary for human readability
        self._save_vocab(file_prefix)

        log.info("tokenizer saved successfully")

    def load(self, model_filename: str) -> None:
        """
        Load tokenizer state from a .model file.

        Merge tokens are assigned sequentially from 256 in file order and the
        vocabulary is rebuilt. Lines that are not two integers are skipped.
        State is only replaced once the whole file has been read.

        :param model_filename: Path to the .model file.
        :raises ModelLoadError: If file does not exist, extension is not .model,
            or the model was written by the other tokenizer type.
        :raises VocabularyError: If a merge refers to an undefined token.
        """
        path = Path(model_filename)

        if not path.exists():
            raise ModelLoadError("model filepath does not exist", model_path=str(path))

        if not path.suffix == MODEL_SUFFIX:
            raise ModelLoadError("expected .model file", model_path=str(path))

        log.info(f"loading model from {path}")

        merges: Encoding = {}

        with path.open("r", encoding="utf-8", newline="\n") as f:
            # header: split pattern, blank or whitespace-only for basic models
            pattern = f.readline().rstrip("\r\n")
            if not pattern.strip():
                pattern = ""

            model_type = "regex" if pattern else "basic"
            if model_type != self.TOKENIZER_TYPE:
                raise ModelLoadError(
                    "tokenizer type mismatch",
                    model_path=str(path),
                    type_mismatch=(model_type, self.TOKENIZER_TYPE),
                )

            # body: one merge pair per line, in merge order
            log.debug("loading merge tokens")
            for lineno, line in enumerate(f, start=2):
                pair = _parse_merge(line)
                if pair is None:
                    log.debug(f"skipping malformed merge at line {lineno}: {line!r}")
                    continue
                if pair in merges:
                    log.warning(f"skipping duplicate merge {pair} at line {lineno}")
                    continue
                merges[pair] = BASE_VOCAB_SIZE + len(merges)

            log.debug(f"loaded {len(merges)} merge rules")

        vocab = build_vocab(merges)
        self._load_pattern(pattern)

        # update tokenizer state after successful read
        self.merges = merges
        self.vocab = vocab

        log.info(
            f"model loaded successfully: {len(self.merges)} merge rules, "
            f"{len(self.vocab)} total tokens"
        )

    def _load_pattern(self, pattern: str) -> None:
        """Adopt the split pattern read from a model file."""
        self.pat = pattern

    def _check_vocab_size(self, vocab_size: int) -> int:
        """Return the number of merges needed to reach ``vocab_size``."""
        if vocab_size < BASE_VOCAB_SIZE:
            raise VocabularyError(
                f"vocab size must be at least {BASE_VOCAB_SIZE}", vocab_size=vocab_size
            )
        return vocab_size - BASE_VOCAB_SIZE

    def _apply_training(self, result: BPETrainingResult, n_merges: int) -> None:
        """Replace merges and vocabulary with a finished training run."""
        if result.n_merges_completed < n_merges:
            log.warning(
                f"no more byte pairs to merge after {result.n_merges_completed} merges "
                f"(requested {n_merges}) stopping early"
            )

        self.merges = result.merges  # used for encoding text -> tokens
        self.vocab = result.vocab  # used for decoding tokens -> text

    def _save_model(self, file_prefix: str) -> None:
        """Persist split pattern and merge pairs to a .model file."""
        model_path = Path(f"{file_prefix}{MODEL_SUFFIX}")
        # create directory if does not exist
        model_path.parent.mkdir(parents=True, exist_ok=True)

        log.debug(f"saving {len(self.merges)} merge rules to {model_path}")

        with model_path.open("w", encoding="utf-8", newline="\n") as f:
            # header: regex pattern, empty line when text is not split
            f.write(f"{self.pat}\n")
            # body: merge pairs in merge order, tokens are implied by position
            for tok0, tok1 in self.merges:
                f.write(f"{tok0} {tok1}\n")

    def _save_vocab(self, file_prefix: str) -> None:
        """Persist human-readable token representations to a .vocab file."""
        vocab_path = Path(f"{file_prefix}{VOCAB_SUFFIX}")
        vocab_path.parent.mkdir(parents=True, exist_ok=True)

        log.debug(f"saving vocab to {vocab_path}")

        with vocab_path.open("w", encoding="utf-8", newline="\n") as f:
            for tok in sorted(self.vocab):
                f.write(f"{tok} [{render_bytes(self.vocab[tok])}]\n")

    def _apply_bpe_chunk(self, tokens: list[Token]) -> list[Token]:
        """
        Apply BPE merges to a token sequence.

        :param tokens: List of tokens (initially bytes 0-255).
        :returns: Compressed token sequence after applying learned merges.
        """
        # loop text compression using BPE algorithm.
        while len(tokens) >= 2:
            # get all unique bigram pairs.
            # we dont need to count frequencies to find min token.
            bigrams = set(zip(tokens, tokens[1:]))
            # retrieve the byte pair with the lowest merge index.
            # because higher index tokens might depend on lower index merged tokens.
            pair: TokenPair = min(
                bigrams,
                key=lambda bp: self.merges.get(bp, float("inf")),
            )
            # no pair to merge.
            if pair not in self.merges:
                break
            tokens = bpe_merge(tokens, pair, self.merges[pair])

        return tokens


def _parse_merge(line: str) -> TokenPair | None:
    """Parse ``"<tok0> <tok1>"``; return ``None`` for anything else."""
    fields = line.split()
    if len(fields) != 2 or not all(f.isascii() and f.isdigit() for f in fields):
        return None
    return int(fields[0]), int(fields[1])
