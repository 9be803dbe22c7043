#!/usr/bin/env python3
# =============================================================================
# zip_reader.py — Store-only ZIP Reader / Verifier
# =============================================================================
#
# Inverse of SPM/zip_builder.py.  Parses an archive from the END, the way
# unzip tools do:
#
#   1. Scan backwards for the end-of-central-directory signature PK\5\6.
#      (The comment is at most 65535 bytes, so the scan is bounded.)
#   2. Read entry count, central directory size and offset from the EOCD.
#   3. Walk the central directory, one 46-byte record + name per entry.
#   4. For each record, follow its offset to the local header PK\3\4 and
#      slice out the stored data.
#
# verify_archive() reports every inconsistency it can find instead of
# stopping at the first:
#   - EOCD counts vs. the number of central records actually present
#   - central directory size vs. bytes actually walked
#   - each offset pointing at a local header signature
#   - local and central name / size / CRC agreeing
#   - CRC32 of the stored bytes matching the recorded CRC
#   - compression method 0
#
# Only the STORE method is understood; anything else is reported.
# =============================================================================

from __future__ import annotations

import struct
from typing import NamedTuple

from SRE.SMM.constants import (
    ZIP_CENTRAL_HEADER_SIG, ZIP_CENTRAL_HEADER_SIZE,
    ZIP_END_OF_DIR_SIG, ZIP_END_OF_DIR_SIZE,
    ZIP_LOCAL_HEADER_SIG, ZIP_LOCAL_HEADER_SIZE,
    ZIP_METHOD_STORE,
)
from SRE.SPM.crc32 import crc32
from SRE.SPM.zip_builder import ZipEntry

_EOCD   = struct.Struct("<4sHHHHIIH")           # 22 bytes
_CENTRAL = struct.Struct("<4sHHHHHHIIIHHHHHII")  # 46 bytes
_LOCAL  = struct.Struct("<4sHHHHHIIIHH")         # 30 bytes

_MAX_COMMENT = 0xFFFF


class ZipFormatError(ValueError):
    """Raised when the archive structure cannot be parsed at all."""


class EndOfDirectory(NamedTuple):
    position:      int   # byte offset of the PK\5\6 record
    disk_entries:  int   # entries on this disk
    total_entries: int   # entries in total
    cd_size:       int   # central directory size in bytes
    cd_offset:     int   # central directory start offset
    comment_len:   int


class CentralRecord(NamedTuple):
    name:         str
    method:       int    # 0 = STORE
    flags:        int
    dos_time:     int
    dos_date:     int
    crc:          int
    comp_size:    int
    size:         int
    local_offset: int    # byte offset of this entry's PK\3\4


# ---------------------------------------------------------------------------

def find_end_of_directory(data: bytes) -> EndOfDirectory:
    lowest = max(0, len(data) - ZIP_END_OF_DIR_SIZE - _MAX_COMMENT)
    pos = data.rfind(ZIP_END_OF_DIR_SIG, lowest)
    if pos < 0 or pos + ZIP_END_OF_DIR_SIZE > len(data):
        raise ZipFormatError("End of central directory record not found")
    (_sig, _disk, _cd_disk, disk_entries, total_entries,
     cd_size, cd_offset, comment_len) = _EOCD.unpack_from(data, pos)
    return EndOfDirectory(pos, disk_entries, total_entries, cd_size, cd_offset, comment_len)


def _walk_central(data: bytes, eocd: EndOfDirectory) -> tuple[list[CentralRecord], int]:
    """Central records plus the byte position just past the last one."""
    records: list[CentralRecord] = []
    pos = eocd.cd_offset

    for index in range(eocd.total_entries):
        if pos + ZIP_CENTRAL_HEADER_SIZE > len(data):
            raise ZipFormatError(f"Central record {index} is truncated")
        fields = _CENTRAL.unpack_from(data, pos)
        if fields[0] != ZIP_CENTRAL_HEADER_SIG:
            raise ZipFormatError(f"Central record {index} has a bad signature at {pos}")
        (_sig, _made, _needed, flags, method, time, date, crc,
         comp_size, size, name_len, extra_len, comment_len,
         _disk, _iattr, _eattr, offset) = fields

        name_start = pos + ZIP_CENTRAL_HEADER_SIZE
        name = data[name_start:name_start + name_len].decode("utf-8", errors="replace")
        records.append(CentralRecord(name, method, flags, time, date, crc,
                                     comp_size, size, offset))
        pos = name_start + name_len + extra_len + comment_len

    return records, pos


def read_archive(data: bytes) -> list[CentralRecord]:
    """
    Parse the central directory.

    Returns
    -------
    list[CentralRecord]
        In central directory order (== local header order for our archives).

    Raises
    ------
    ZipFormatError
        If the EOCD is missing or a central record is truncated / mis-signed.
    """
    data = bytes(data)
    records, _end = _walk_central(data, find_end_of_directory(data))
    return records


def _local_data(data: bytes, record: CentralRecord) -> tuple[tuple, bytes]:
    if record.local_offset + ZIP_LOCAL_HEADER_SIZE > len(data):
        raise ZipFormatError(f"{record.name}: local header offset {record.local_offset} out of range")
    fields = _LOCAL.unpack_from(data, record.local_offset)
    name_len, extra_len = fields[9], fields[10]
    start = record.local_offset + ZIP_LOCAL_HEADER_SIZE + name_len + extra_len
    return fields, data[start:start + record.comp_size]


def verify_archive(data: bytes) -> list[str]:
    """Every structural problem found, as readable strings. Empty = valid."""
    data = bytes(data)
    try:
        eocd = find_end_of_directory(data)
        records, end = _walk_central(data, eocd)
    except ZipFormatError as e:
        return [str(e)]

    problems: list[str] = []
    if eocd.disk_entries != eocd.total_entries:
        problems.append(f"EOCD disk entries {eocd.disk_entries} != total {eocd.total_entries}")
    if end != eocd.position:
        problems.append(f"EOCD declares {eocd.total_entries} entries, but the central "
                        f"directory walk ends at {end}, not {eocd.position}")

    walked = end - eocd.cd_offset
    if walked != eocd.cd_size:
        problems.append(f"Central directory size {eocd.cd_size} != {walked} bytes walked")
    if eocd.cd_offset + eocd.cd_size != eocd.position:
        problems.append("Central directory does not end at the EOCD record")

    for r in records:
        if r.local_offset + ZIP_LOCAL_HEADER_SIZE > len(data):
            problems.append(f"{r.name}: local header offset {r.local_offset} out of range")
            continue
        if data[r.local_offset:r.local_offset + 4] != ZIP_LOCAL_HEADER_SIG:
            problems.append(f"{r.name}: offset {r.local_offset} is not a local header")
            continue
        if r.method != ZIP_METHOD_STORE:
            problems.append(f"{r.name}: compression method {r.method} (expected STORE)")
        if r.comp_size != r.size:
            problems.append(f"{r.name}: stored size {r.comp_size} != size {r.size}")

        fields, payload = _local_data(data, r)
        local_crc, local_size = fields[6], fields[8]
        name_start = r.local_offset + ZIP_LOCAL_HEADER_SIZE
        local_name = data[name_start:name_start + fields[9]].decode("utf-8", errors="replace")
        if local_name != r.name:
            problems.append(f"{r.name}: local header names {local_name!r}")
        if local_crc != r.crc or local_size != r.size:
            problems.append(f"{r.name}: local header CRC/size disagree with central record")
        if len(payload) != r.size:
            problems.append(f"{r.name}: data truncated ({len(payload)} of {r.size} bytes)")
        elif crc32(payload) != r.crc:
            problems.append(f"{r.name}: CRC mismatch (recorded {r.crc:08X}, "
                            f"actual {crc32(payload):08X})")

    return problems


def extract_entries(data: bytes) -> list[ZipEntry]:
    """All entries, in directory order, as ZipEntry(name, data)."""
    data = bytes(data)
    entries = []
    for r in read_archive(data):
        if data[r.local_offset:r.local_offset + 4] != ZIP_LOCAL_HEADER_SIG:
            raise ZipFormatError(f"{r.name}: offset {r.local_offset} is not a local header")
        _fields, payload = _local_data(data, r)
        entries.append(ZipEntry(r.name, payload))
    return entries
