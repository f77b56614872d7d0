"""Built-in regex patterns for splitting text before BPE."""

from enum import Enum

from .errors import PatternError


class TokenPattern(str, Enum):
    """
    Pre-defined regex patterns for splitting text into chunks.

    Both separate contractions, letter runs, digit runs, punctuation runs and
    whitespace runs. Sources:
    https://github.com/openai/tiktoken/blob/main/tiktoken_ext/openai_public.py
    """

    GPT2 = (
        r"'(?:[sdmt]|ll|ve|re)|"
        r" ?\p{L}+|"
        r" ?\p{N}+|"
        r" ?[^\s\p{L}\p{N}]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    GPT4 = (
        r"'(?i:[sdmt]|ll|ve|re)|"
        r"[^\r\n\p{L}\p{N}]?+\p{L}+|"
        r"\p{N}{1,3}|"
        r" ?[^\s\p{L}\p{N}]++[\r\n]*|"
        r"\s*[\r\n]|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    @classmethod
    def get(cls, name: str) -> str:
        """Get patterns by name (case-insensitive)."""
        try:
            return cls[name.upper().replace("-", "_")].value
        except KeyError:
            raise PatternError(
                f"Unknown pattern: {name!r}. "
                f"Valid patterns: {', '.join(pat.name for pat in cls)}"
            )


DEFAULT_PATTERN: str = TokenPattern.GPT4.value


def list_patterns() -> list[str]:
    """Return names of all available built-in splitting patterns."""
    return [pat.name for pat in TokenPattern]


def get_pattern(name: str) -> str:
    """Return the regex source of a built-in pattern."""
    return TokenPattern.get(name)
