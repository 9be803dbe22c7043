# =============================================================================
# crc32.py — Table-driven CRC32
# =============================================================================
#
# The standard ZIP / PNG / zlib CRC, bit-for-bit:
#   reflected polynomial 0xEDB88320, initial value 0xFFFFFFFF,
#   final value complemented.
#
# Reference vectors:
#   crc32(b"")          == 0x00000000
#   crc32(b"123456789") == 0xCBF43926
#
# A CRC mismatch makes every ZIP reader reject the entry, so this is an
# external compatibility requirement, not a house convention.

from SRE.SMM.constants import CRC32_POLYNOMIAL


def _build_table() -> tuple[int, ...]:
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            c = (CRC32_POLYNOMIAL ^ (c >> 1)) if (c & 1) else (c >> 1)
        table.append(c)
    return tuple(table)


# Built once per process
CRC32_TABLE = _build_table()


def crc32(data: bytes, crc: int = 0) -> int:
    """
    CRC32 of a byte buffer.

    Args:
        data: Any bytes-like object.
        crc:  Checksum of preceding data, to continue a running CRC
              (same convention as zlib.crc32). 0 for a fresh checksum.

    Returns:
        Unsigned 32-bit checksum.
    """
    table = CRC32_TABLE
    c = crc ^ 0xFFFFFFFF
    for byte in bytes(data):
        c = table[(c ^ byte) & 0xFF] ^ (c >> 8)
    return c ^ 0xFFFFFFFF
