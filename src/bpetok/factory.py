"""Factory functions for creating tokenizers."""

from pathlib import Path
from typing import Final, Literal

from .errors import ModelLoadError, UnknownTokenizerError
from .pattern import TokenPattern
from .tokenizers.base import MODEL_SUFFIX, Tokenizer
from .tokenizers.basic import BasicTokenizer
from .tokenizers.regex import RegexTokenizer

TokenizerName = Literal["basic", "regex"]

_TOKENIZER_REGISTRY: Final[dict[str, type[Tokenizer]]] = {
    "regex": RegexTokenizer,
    "basic": BasicTokenizer,
}


def list_tokenizers() -> list[str]:
    """Return names of all available tokenizer variants."""
    return list(_TOKENIZER_REGISTRY.keys())


def get_tokenizer(name: TokenizerName = "regex", pattern: str = "gpt4") -> Tokenizer:
    """
    Create an untrained tokenizer by variant name.

    :param name: "basic" splits nothing, "regex" splits text with ``pattern``.
    :param pattern: Built-in pattern name used by the regex variant.
    :return: Fresh tokenizer instance.
    :raises UnknownTokenizerError: If ``name`` is not a known variant.
    :raises PatternError: If ``pattern`` is not a built-in pattern name.

    .. code-block:: python

        tokenizer = get_tokenizer("basic")
        tokenizer = get_tokenizer("regex", pattern="gpt2")
    """
    if name not in _TOKENIZER_REGISTRY:
        raise UnknownTokenizerError(
            "unknown tokenizer name",
            invalid_name=name,
            available=list_tokenizers(),
        )

    if name == "regex":
        return RegexTokenizer(TokenPattern.get(pattern))

    return _TOKENIZER_REGISTRY[name]()


def _detect_tokenizer_type(model_path: str) -> str:
    """Read tokenizer type from the model file's pattern line."""
    path = Path(model_path)

    if not path.exists():
        raise ModelLoadError("model filepath does not exist", model_path=str(path))

    if path.suffix != MODEL_SUFFIX:
        raise ModelLoadError("expected .model file", model_path=str(path))

    with path.open("r", encoding="utf-8", newline="\n") as f:
        pattern = f.readline().rstrip("\r\n")

    return "regex" if pattern.strip() else "basic"


def from_pretrained(model_path: str) -> Tokenizer:
    """
    Load a pre-trained tokenizer from disk.

    The variant is detected from the model file: an empty first line means a
    basic tokenizer, otherwise the line is the regex tokenizer's pattern.

    :param model_path: Path to the .model file.
    :return: Loaded tokenizer instance with vocabulary and configuration.
    :raises ModelLoadError: If file doesn't exist or has wrong extension.

    .. code-block:: python

        tokenizer = from_pretrained("models/regex.model")
        tokens = tokenizer.encode("Hello world")
    """
    tok_type = _detect_tokenizer_type(model_path)

    # instantiate and load, load() replaces the default pattern
    tokenizer = _TOKENIZER_REGISTRY[tok_type]()
    tokenizer.load(model_path)

    return tokenizer
