"""Unit tests for BasicTokenizer and RegexTokenizer training, encode/decode and edge cases."""

import logging

import pytest

import bpetok


CORPUS = (
    "The quick brown fox jumps over the lazy dog. "
    "The dog didn't mind; it's used to the fox by now. "
    "Numbers like 12345 and 2024 show up too!!! "
) * 8

ROUNDTRIP_TEXTS = [
    "",
    "?",
    "x",
    "   \n\t  ",
    "Hello, world!",
    "hello world!!!? (안녕하세요!) lol123 😉",
    "Café naïve résumé — 日本語の文章です。 👩🏽‍💻🇦🇺",
]


# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def regex_tokenizer():
    """Return a trained RegexTokenizer."""
    tok = bpetok.RegexTokenizer()
    tok.train(CORPUS, vocab_size=320)
    return tok


@pytest.fixture
def basic_tokenizer():
    """Return a trained BasicTokenizer."""
    tok = bpetok.BasicTokenizer()
    tok.train(CORPUS, vocab_size=320)
    return tok


# Encode-decode round-trip
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("text", ROUNDTRIP_TEXTS)
def test_roundtrip_regex(regex_tokenizer, text):
    """Encode then decode returns original text for RegexTokenizer."""
    assert regex_tokenizer.decode(regex_tokenizer.encode(text)) == text


@pytest.mark.parametrize("text", ROUNDTRIP_TEXTS)
def test_roundtrip_basic(basic_tokenizer, text):
    """Encode then decode returns original text for BasicTokenizer."""
    assert basic_tokenizer.decode(basic_tokenizer.encode(text)) == text


@pytest.mark.parametrize("cls", [bpetok.BasicTokenizer, bpetok.RegexTokenizer])
@pytest.mark.parametrize("text", ROUNDTRIP_TEXTS)
def test_roundtrip_untrained(cls, text):
    """A tokenizer without merges encodes to raw bytes and still round-trips."""
    tok = cls()
    tokens = tok.encode(text)
    assert tokens == list(text.encode("utf-8"))
    assert tok.decode(tokens) == text


def test_empty_string(regex_tokenizer):
    """Empty string encodes to empty list and decodes back."""
    assert regex_tokenizer.encode("") == []
    assert regex_tokenizer.decode([]) == ""


def test_repetitive_text_creates_merges(regex_tokenizer):
    """Repetitive text produces fewer tokens due to merges."""
    text = "the the the the the"
    assert len(regex_tokenizer.encode(text)) < len(text.encode("utf-8"))


# Reference scenario
# ---------------------------------------------------------------------------


def test_basic_train_reference_scenario():
    tok = bpetok.BasicTokenizer()
    tok.train("aaabdaaabac", vocab_size=258)

    assert list(tok.merges.items()) == [((97, 97), 256), ((97, 98), 257)]
    assert tok.vocab[256] == b"aa"
    assert tok.vocab[257] == b"ab"

    tokens = tok.encode("aaabdaaabac")
    assert tokens == [256, 257, 100, 256, 257, 97, 99]
    assert tok.decode(tokens) == "aaabdaaabac"


def test_encode_applies_earliest_merge_first():
    """Encoding prefers the lowest merge token even when a later pair appears first."""
    tok = bpetok.BasicTokenizer()
    tok.train("bcbcbc abab", vocab_size=258)
    # (98, 99) is more frequent than (97, 98), so it was learned first
    assert tok.merges[(98, 99)] == 256
    assert tok.encode("abc") == [97, 256]


# Training invariants
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("cls", [bpetok.BasicTokenizer, bpetok.RegexTokenizer])
def test_vocab_size_after_training(cls):
    """Vocabulary holds the base bytes plus one entry per learned merge."""
    tok = cls()
    tok.train(CORPUS, vocab_size=300)
    assert 0 < len(tok.merges) <= 300 - 256
    assert tok.vocab_size() == 256 + len(tok.merges)


@pytest.mark.parametrize("cls", [bpetok.BasicTokenizer, bpetok.RegexTokenizer])
def test_training_is_deterministic(cls):
    first, second = cls(), cls()
    first.train(CORPUS, vocab_size=300)
    second.train(CORPUS, vocab_size=300)
    assert list(first.merges.items()) == list(second.merges.items())
    assert first.vocab == second.vocab


@pytest.mark.parametrize("cls", [bpetok.BasicTokenizer, bpetok.RegexTokenizer])
def test_merge_tokens_are_sequential(cls):
    tok = cls()
    tok.train(CORPUS, vocab_size=300)
    assert list(tok.merges.values()) == list(range(256, 256 + len(tok.merges)))


def test_vocab_size_below_base_raises():
    with pytest.raises(bpetok.VocabularyError):
        bpetok.BasicTokenizer().train("hello", vocab_size=255)
    with pytest.raises(bpetok.VocabularyError):
        bpetok.RegexTokenizer().train("hello", vocab_size=10)


def test_vocab_size_of_base_learns_nothing():
    tok = bpetok.BasicTokenizer()
    tok.train("hello hello", vocab_size=256)
    assert tok.merges == {}
    assert tok.vocab_size() == 256


def test_training_stops_early(caplog):
    """Short input runs out of pairs before the target size is reached."""
    tok = bpetok.BasicTokenizer()
    with caplog.at_level(logging.WARNING):
        tok.train("ab", vocab_size=300)
    assert tok.merges == {(97, 98): 256}
    assert "stopping early" in caplog.text


def test_training_accepts_list_input():
    from_list, from_str = bpetok.BasicTokenizer(), bpetok.BasicTokenizer()
    from_list.train(["aaab", "daaabac"], vocab_size=258)
    from_str.train("aaabdaaabac", vocab_size=258)
    assert from_list.merges == from_str.merges


def test_retraining_replaces_merges():
    tok = bpetok.BasicTokenizer()
    tok.train("aaaa", vocab_size=257)
    tok.train("bbbb", vocab_size=257)
    assert tok.merges == {(98, 98): 256}
    assert tok.vocab[256] == b"bb"


def test_training_logs_elapsed_time(caplog):
    with caplog.at_level(logging.INFO, logger="bpetok._decorators"):
        bpetok.BasicTokenizer().train("hello", vocab_size=258)
    assert "BasicTokenizer.train completed in" in caplog.text


# Chunk isolation
# ---------------------------------------------------------------------------


def test_regex_merges_never_cross_chunks():
    """With whitespace as its own chunk, spaces never merge with letters."""
    tok = bpetok.RegexTokenizer(r"\S+|\s+")
    tok.train("ab cd", vocab_size=300)
    assert tok.merges == {(97, 98): 256, (99, 100): 257}


def test_basic_merges_cross_whitespace():
    tok = bpetok.BasicTokenizer()
    tok.train("ab cd", vocab_size=257)
    assert tok.merges == {(32, 99): 256}


def test_regex_learned_tokens_stay_inside_chunks(regex_tokenizer):
    """Every learned token is itself a single chunk under the split pattern."""
    for mtok in regex_tokenizer.merges.values():
        token_bytes = regex_tokenizer.vocab[mtok]
        try:
            text = token_bytes.decode("utf-8")
        except UnicodeDecodeError:
            continue
        chunks = regex_tokenizer.compiled_pat.findall(text)
        assert chunks == [text]


def test_regex_unmatched_text_is_dropped(caplog):
    """A pattern that skips characters loses them and says so at debug level."""
    tok = bpetok.RegexTokenizer(r"\w+")
    with caplog.at_level(logging.DEBUG, logger="bpetok.tokenizers.regex"):
        tokens = tok.encode("a b")
    assert tok.decode(tokens) == "ab"
    assert "1 of 3 chars unmatched" in caplog.text


@pytest.mark.parametrize("cls", [bpetok.BasicTokenizer, bpetok.RegexTokenizer])
def test_lone_surrogate_encodes_as_question_mark(cls):
    tok = cls()
    assert tok.decode(tok.encode("a\ud800b")) == "a?b"


# Decoding
# ---------------------------------------------------------------------------


def test_decode_skips_unknown_tokens(basic_tokenizer):
    assert basic_tokenizer.decode([104, 99_999, 105]) == "hi"
    assert basic_tokenizer.decode_bytes([104, -1, 105]) == b"hi"


def test_decode_invalid_utf8_returns_diagnostic(caplog):
    tok = bpetok.BasicTokenizer()
    with caplog.at_level(logging.WARNING):
        text = tok.decode([0xFF, 104])
    assert text.startswith("invalid utf-8 sequence")
    assert "not valid utf-8" in caplog.text


def test_decode_with_error_handler():
    tok = bpetok.BasicTokenizer()
    assert tok.decode([104, 0xFF], errors="replace") == "h�"
    with pytest.raises(UnicodeDecodeError):
        tok.decode([0xFF], errors="strict")


# Patterns and factory
# ---------------------------------------------------------------------------


def test_regex_default_pattern_is_gpt4():
    tok = bpetok.RegexTokenizer()
    assert tok.pat == bpetok.TokenPattern.GPT4.value
    assert tok.compiled_pat.findall("hello world's 12345") == [
        "hello",
        " world",
        "'s",
        " ",
        "123",
        "45",
    ]


def test_regex_accepts_token_pattern_member():
    tok = bpetok.RegexTokenizer(bpetok.TokenPattern.GPT2)
    assert tok.pat == bpetok.TokenPattern.GPT2.value


@pytest.mark.parametrize("pattern", ["", "(", "a\nb"])
def test_regex_invalid_pattern_raises(pattern):
    with pytest.raises(bpetok.PatternError):
        bpetok.RegexTokenizer(pattern)


def test_get_tokenizer():
    assert isinstance(bpetok.get_tokenizer("basic"), bpetok.BasicTokenizer)
    tok = bpetok.get_tokenizer("regex", pattern="gpt2")
    assert isinstance(tok, bpetok.RegexTokenizer)
    assert tok.pat == bpetok.get_pattern("gpt2")


def test_get_tokenizer_unknown_name_raises():
    with pytest.raises(bpetok.UnknownTokenizerError):
        bpetok.get_tokenizer("wordpiece")


def test_unknown_pattern_raises():
    with pytest.raises(bpetok.PatternError):
        bpetok.get_pattern("gpt5")


def test_list_helpers():
    assert bpetok.list_tokenizers() == ["regex", "basic"]
    assert bpetok.list_patterns() == ["GPT2", "GPT4"]
