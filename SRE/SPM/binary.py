# =============================================================================
# binary.py — Little-endian Primitive Writer
# =============================================================================
#
# Every multi-byte field in ZIP and RIFF is little-endian.  Values are
# masked to the field width: an oversized value wraps silently instead of
# raising, which is the documented ZIP32 limitation of the archive builder.

import struct


def u16le(value: int) -> bytes:
    """Pack one unsigned 16-bit int, little-endian."""
    return struct.pack("<H", value & 0xFFFF)


def u32le(value: int) -> bytes:
    """Pack one unsigned 32-bit int, little-endian."""
    return struct.pack("<I", value & 0xFFFFFFFF)


def ascii4(tag: str) -> bytes:
    """A 4-character chunk tag such as 'RIFF' or 'fmt '."""
    raw = tag.encode("ascii")
    if len(raw) != 4:
        raise ValueError(f"chunk tag must be 4 ASCII characters, got {tag!r}")
    return raw


def concat(parts) -> bytes:
    """Join byte buffers in order into one contiguous buffer."""
    return b"".join(bytes(p) for p in parts)
