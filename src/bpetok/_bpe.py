"""
Core Byte Pair Encoding (BPE) operations.
"""

import logging
from collections import Counter
from collections.abc import Iterable
from typing import Final

from .errors import VocabularyError
from .types import Encoding, Token, TokenPair, Vocabulary

BASE_VOCAB_SIZE: Final[int] = 256

log = logging.getLogger(__name__)


def update_bpe_freqs(tokens: list[Token], counter: Counter[TokenPair]) -> None:
    """
    Add the consecutive pair counts of one token sequence to ``counter``.

    Sequences of length 0 or 1 contribute nothing.
    """
    counter.update(zip(tokens, tokens[1:]))


def bpe_freqs(chunks: Iterable[list[Token]]) -> Counter[TokenPair]:
    """
    Count consecutive token pairs across independent token sequences.

    Pairs are only formed inside a sequence, never across the boundary of two
    neighbouring sequences. Counts for the same pair add up across sequences.

    :param chunks: Token sequences to analyze.
    :return: Mapping of token pairs to their combined occurrence counts.
    """
    counter: Counter[TokenPair] = Counter()
    for chunk_toks in chunks:
        update_bpe_freqs(chunk_toks, counter)
    return counter


def most_frequent_pair(freqs: Counter[TokenPair]) -> TokenPair | None:
    """
    Pick the pair with the highest count.

    Ties go to the lexicographically smallest pair so training is
    reproducible regardless of counter iteration order.
    """
    if not freqs:
        return None
    return min(freqs.items(), key=lambda item: (-item[1], item[0]))[0]


def bpe_merge(tokens: list[Token], target: TokenPair, new_tok: Token) -> list[Token]:
    """
    Merge all occurrences of a target token pair into a single new token.

    Scanning is greedy from the left, so in ``a a a`` the pair ``(a, a)`` is
    merged once and the trailing ``a`` is kept. The input list is not modified.

    Note that some of the new tokens generated may be partial utf-8 sequences
    so they cannot be decoded into valid strings on their own.

    :param tokens: Original list of tokens.
    :param target: The consecutive pair of tokens to merge.
    :param new_tok: The new token that replaces the target pair.
    :return: New token list with all target pairs replaced by ``new_tok``.
    """
    newtoks: list[Token] = []

    i = 0
    n = len(tokens)
    while i < n:
        # check if we can form a pair and it matches the target
        if i < n - 1 and tokens[i] == target[0] and tokens[i + 1] == target[1]:
            newtoks.append(new_tok)
            i += 2
        else:
            newtoks.append(tokens[i])
            i += 1

    return newtoks


def build_vocab(merges: Encoding) -> Vocabulary:
    """
    Rebuild the token-to-bytes vocabulary from a merge table.

    Merged tokens are expanded in ascending token order so child tokens are
    always present before their parent.

    :param merges: Byte pair -> merge token mapping.
    :return: Vocabulary with the 256 base bytes followed by every merge token.
    :raises VocabularyError: If a merge refers to a token that is not yet
        defined, which means the merge table is corrupt or out of order.
    """
    # mapping for base 256 tokens
    vocab: Vocabulary = {btok: bytes([btok]) for btok in range(BASE_VOCAB_SIZE)}
    for (tok0, tok1), mtok in sorted(merges.items(), key=lambda x: x[1]):
        for ctok in (tok0, tok1):
            if ctok not in vocab:
                raise VocabularyError(
                    f"merge token {mtok} refers to an undefined token",
                    invalid_tok=ctok,
                )
        vocab[mtok] = vocab[tok0] + vocab[tok1]

    log.debug(f"built vocabulary with {len(vocab)} tokens")
    return vocab
