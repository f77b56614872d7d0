"""
Utilities for converting token bytes to displayable strings.
"""


def _render_byte(b: int) -> str:
    # control range 0x00-0x1f and DEL
    if b < 0x20 or b == 0x7F:
        return f"\\x{b:02x}"
    return chr(b)


def render_bytes(b: bytes) -> str:
    """
    Render token bytes one byte at a time.

    Control bytes (0x00-0x1f, 0x7f) become ``\\xHH`` escapes and every other
    byte is shown as the character with that code point, so a token that holds
    part of a multi-byte sequence still renders.
    """
    return "".join(_render_byte(byte) for byte in b)
