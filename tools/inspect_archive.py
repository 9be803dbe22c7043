"""
inspect_archive.py  —  list and verify a store-only export archive

Prints every entry with its size, CRC32 and local-header offset, then runs
the SVM verifier (offsets, counts, CRCs).  Exit status 1 if anything is
wrong, so it can gate a release script.

Usage:
  python tools/inspect_archive.py vksr-windows-script.zip
  python tools/inspect_archive.py vksr-windows-script.zip --wav
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from SRE.SPM.wav_normalizer import is_canonical_wav
from SRE.SVM.zip_reader import ZipFormatError, extract_entries, read_archive, verify_archive


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="List and verify an export archive.")
    parser.add_argument("archive", help="path to a .zip built by export_package.py")
    parser.add_argument("--wav", action="store_true",
                        help="also check that every .wav entry passes the RIFF/WAVE sniff")
    args = parser.parse_args(argv)

    with open(args.archive, "rb") as f:
        data = f.read()

    try:
        records = read_archive(data)
    except ZipFormatError as e:
        print(f"ERROR: {e}")
        return 1

    print("=" * 72)
    print(f"Archive : {args.archive}  ({len(data):,} bytes)")
    print(f"Entries : {len(records)}")
    print("=" * 72)
    print(f"  {'offset':>10}  {'size':>10}  {'crc32':>8}  name")
    for r in records:
        print(f"  {r.local_offset:>10}  {r.size:>10}  {r.crc:08X}  {r.name}")

    problems = verify_archive(data)
    if args.wav and not problems:
        for entry in extract_entries(data):
            if entry.name.lower().endswith(".wav") and not is_canonical_wav(entry.data):
                problems.append(f"{entry.name}: not a RIFF/WAVE file")

    print("=" * 72)
    if problems:
        for p in problems:
            print(f"  [FAIL] {p}")
    else:
        print("  [PASS] archive structure and CRCs verified")
    print("=" * 72)
    return 1 if problems else 0


if __name__ == "__main__":
    sys.exit(main())
