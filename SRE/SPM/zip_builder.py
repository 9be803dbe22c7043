# =============================================================================
# zip_builder.py — Store-only ZIP Archive Builder
# =============================================================================
#
# Builds a minimal, valid ZIP32 archive with compression method 0 (STORE).
#
# Archive layout (PKWARE APPNOTE 6.3, all integers little-endian):
#
#   [local file header 0][name 0][data 0]      ← offset_0 = 0
#   [local file header 1][name 1][data 1]      ← offset_1
#   ...
#   [central dir header 0][name 0]             ← cd_offset
#   [central dir header 1][name 1]
#   ...
#   [end of central directory]                 ← cd_offset + cd_size
#
# Local file header (30 bytes + name):
#   sig PK\3\4 | ver needed 20 | flags 0 | method 0 | dos time | dos date
#   | crc32 | comp size | uncomp size | name len | extra len 0
#
# Central directory header (46 bytes + name):
#   sig PK\1\2 | ver made 20 | ver needed 20 | flags 0 | method 0
#   | dos time | dos date | crc32 | comp size | uncomp size | name len
#   | extra len 0 | comment len 0 | disk 0 | int attr 0 | ext attr 0
#   | local header offset
#
# End of central directory (22 bytes):
#   sig PK\5\6 | disk 0 | cd disk 0 | entries here | entries total
#   | cd size | cd offset | comment len 0
#
# INVARIANTS:
#   - central records appear in the same order as local headers
#   - every recorded offset is the byte position of that entry's PK\3\4
#   - entry counts are the literal number of entries (duplicate names are
#     passed through untouched)
#   - sizes / offsets above 4 GiB wrap (ZIP32 limitation, not guarded)
#
# Main API:
#   build_zip(entries, when=None) -> bytes
#   ZipEntry(name, data)
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from SRE.SMM.constants import (
    DOS_EPOCH_YEAR,
    ZIP_CENTRAL_HEADER_SIG, ZIP_END_OF_DIR_SIG, ZIP_LOCAL_HEADER_SIG,
    ZIP_FLAGS, ZIP_METHOD_STORE, ZIP_VERSION,
)
from .binary import concat, u16le, u32le
from .crc32 import crc32


@dataclass(frozen=True)
class ZipEntry:
    """One named file to store in the archive."""

    name: str
    data: bytes


# ── MS-DOS timestamp ──────────────────────────────────────────────────────────

def dos_time(when: datetime) -> int:
    """bits 0-4 = seconds/2, bits 5-10 = minutes, bits 11-15 = hours."""
    return ((when.second >> 1) | (when.minute << 5) | (when.hour << 11)) & 0xFFFF


def dos_date(when: datetime) -> int:
    """bits 0-4 = day, bits 5-8 = month, bits 9-15 = year - 1980."""
    return (when.day | (when.month << 5) | ((when.year - DOS_EPOCH_YEAR) << 9)) & 0xFFFF


# ── Records ───────────────────────────────────────────────────────────────────

def _local_header(name: bytes, crc: int, size: int, time: int, date: int) -> bytes:
    return concat([
        ZIP_LOCAL_HEADER_SIG,   # signature
        u16le(ZIP_VERSION),     # version needed to extract
        u16le(ZIP_FLAGS),       # general purpose flags
        u16le(ZIP_METHOD_STORE),  # compression method (0 = STORE)
        u16le(time),            # last mod time
        u16le(date),            # last mod date
        u32le(crc),             # CRC32
        u32le(size),            # compressed size
        u32le(size),            # uncompressed size
        u16le(len(name)),       # filename length
        u16le(0),               # extra field length
        name,
    ])


def _central_header(name: bytes, crc: int, size: int, time: int, date: int,
                    offset: int) -> bytes:
    return concat([
        ZIP_CENTRAL_HEADER_SIG,  # signature
        u16le(ZIP_VERSION),     # version made by
        u16le(ZIP_VERSION),     # version needed to extract
        u16le(ZIP_FLAGS),       # general purpose flags
        u16le(ZIP_METHOD_STORE),  # compression method
        u16le(time),            # last mod time
        u16le(date),            # last mod date
        u32le(crc),             # CRC32
        u32le(size),            # compressed size
        u32le(size),            # uncompressed size
        u16le(len(name)),       # filename length
        u16le(0),               # extra field length
        u16le(0),               # file comment length
        u16le(0),               # disk number start
        u16le(0),               # internal attributes
        u32le(0),               # external attributes
        u32le(offset),          # offset of local header
        name,
    ])


def _end_of_central_directory(count: int, cd_size: int, cd_offset: int) -> bytes:
    return concat([
        ZIP_END_OF_DIR_SIG,     # signature
        u16le(0),               # number of this disk
        u16le(0),               # disk where central directory starts
        u16le(count),           # central records on this disk
        u16le(count),           # total central records
        u32le(cd_size),         # size of central directory
        u32le(cd_offset),       # offset of central directory
        u16le(0),               # comment length
    ])


# ── Public API ────────────────────────────────────────────────────────────────

def build_zip(entries: Iterable[ZipEntry], when: Optional[datetime] = None) -> bytes:
    """
    Assemble entries into one store-only ZIP archive.

    Parameters
    ----------
    entries : iterable of ZipEntry
        Written in the given order.  Names are encoded as UTF-8.
    when : datetime, optional
        Timestamp shared by every entry.  Defaults to now (local time).

    Returns
    -------
    bytes
        The complete archive: local headers + data, central directory,
        end-of-central-directory record.
    """
    when = when or datetime.now()
    time = dos_time(when)
    date = dos_date(when)

    local_parts:   list[bytes] = []
    central_parts: list[bytes] = []
    offset = 0
    count  = 0

    for entry in entries:
        name = entry.name.encode("utf-8")
        data = bytes(entry.data)
        crc  = crc32(data)
        size = len(data)

        local = _local_header(name, crc, size, time, date)
        local_parts.append(local)
        local_parts.append(data)
        central_parts.append(_central_header(name, crc, size, time, date, offset))

        offset += len(local) + size
        count  += 1

    cd_offset = offset
    cd_size   = sum(len(c) for c in central_parts)

    return concat(local_parts + central_parts
                  + [_end_of_central_directory(count, cd_size, cd_offset)])
