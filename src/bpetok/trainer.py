"""Standalone BPE training module."""

from dataclasses import dataclass
import logging

from ._bpe import BASE_VOCAB_SIZE, bpe_freqs, bpe_merge, most_frequent_pair
from .types import Encoding, Token, Vocabulary

log = logging.getLogger(__name__)


@dataclass
class BPETrainingResult:
    """Results from one BPE training run."""

    vocab: Vocabulary
    merges: Encoding
    n_merges_completed: int


def train_bpe(
    chunks: list[list[Token]], n_merges: int, verbose: bool = False
) -> BPETrainingResult:
    """
    Learn up to ``n_merges`` byte pair merges from independent token sequences.

    Every step counts pairs over all chunks, merges the most frequent one in
    each chunk and assigns it the next token id. A merge never spans two
    chunks. Training stops early once no pair is left.

    :param chunks: Token sequences to learn from (typically bytes 0-255).
        Basic tokenizers pass a single chunk.
    :param n_merges: Maximum number of merge operations to perform.
    :param verbose: Log each learned merge when ``True``.
    :returns: Training output containing vocab, merge rules, and completed merge count.
    """
    merges: Encoding = {}
    vocab: Vocabulary = {tok: bytes([tok]) for tok in range(BASE_VOCAB_SIZE)}

    for i in range(n_merges):
        new_tok = BASE_VOCAB_SIZE + i
        bp_freqs = bpe_freqs(chunks)
        # no valid pairs remain:
        # 1. text compressed to single tokens per chunk
        # 2. input too short to form enough pairs before vocab size met
        pair = most_frequent_pair(bp_freqs)
        if pair is None:
            break
        # only rewrite chunks that can contain the pair
        chunks = [
            bpe_merge(chunk_toks, pair, new_tok) if len(chunk_toks) > 1 else chunk_toks
            for chunk_toks in chunks
        ]
        # save merge info and extend vocabulary with new token's mapping
        merges[pair] = new_tok
        vocab[new_tok] = vocab[pair[0]] + vocab[pair[1]]

        if verbose:
            log.info(
                f"merge {i + 1}/{n_merges}: {pair} -> {new_tok} "
                f"had {bp_freqs[pair]} occurrences"
            )

    return BPETrainingResult(
        vocab=vocab,
        merges=merges,
        n_merges_completed=len(merges),
    )


__all__ = ["BPETrainingResult", "train_bpe"]
