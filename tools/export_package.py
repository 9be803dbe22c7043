"""
export_package.py  —  build the driver-script archive from the command line

Reads the saved configuration (VKSR_CONFIG_PATH, or --config), normalizes
every configured source to 16-bit PCM WAV and writes
vksr-<platform>-script.zip.

Usage:
  python tools/export_package.py
  python tools/export_package.py --config my-sounds.json --out dist/
  python tools/export_package.py --platform windows --workers 8 -v
"""
import argparse
import os
import pathlib
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from SRE.SCM.settings import ReplacerSettings, configure_logging
from SRE.SCM.store import JsonConfigStore
from SRE.SMM.constants import MODE_DISPLAY_NAMES
from SRE.SPM.export import ExportOrchestrator
from SRE.SPM.platforms import UnsupportedPlatformError, available_platforms


def main(argv=None) -> int:
    settings = ReplacerSettings.load()

    parser = argparse.ArgumentParser(description="Export configured sounds as a ZIP package.")
    parser.add_argument("--config", default=settings.config_path,
                        help=f"configuration JSON (default: {settings.config_path})")
    parser.add_argument("--platform", default=settings.platform,
                        help=f"target platform, one of {available_platforms()}")
    parser.add_argument("--out", default=".",
                        help="output directory or .zip path (default: current directory)")
    parser.add_argument("--workers", type=int, default=settings.export_workers,
                        help="parallel fetch/convert workers")
    parser.add_argument("--timeout", type=float, default=settings.fetch_timeout,
                        help="network timeout per source, seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    configure_logging("DEBUG" if args.verbose else settings.log_level)

    store = JsonConfigStore(args.config)
    try:
        orchestrator = ExportOrchestrator(store, platform=args.platform,
                                          max_workers=args.workers, timeout=args.timeout)
    except UnsupportedPlatformError as e:
        print(f"ERROR: {e}")
        return 2

    config = store.read()
    bundle = orchestrator.collect(config)

    out = pathlib.Path(args.out)
    if out.suffix.lower() != ".zip":
        out = out / bundle.filename
    out.parent.mkdir(parents=True, exist_ok=True)
    data = bundle.to_zip()
    out.write_bytes(data)

    print("=" * 60)
    print(f"Platform : {orchestrator.generator.display_name}")
    print(f"Config   : {store.path}")
    print(f"Archive  : {out}  ({len(data):,} bytes, {len(bundle.entries)} entries)")
    print("=" * 60)
    for info in bundle.audio_infos:
        mode = MODE_DISPLAY_NAMES.get(info.mode, info.mode)
        print(f"  {info.target_filename:<28} {mode:<9} {len(info.source_files)} source(s)")
    if bundle.skipped:
        print()
        print(f"Skipped {len(bundle.skipped)} source(s):")
        for slot_id, index, reason in bundle.skipped:
            label = config.slots[slot_id].sources[index].display_name
            print(f"  {slot_id}[{index}] {label}: {reason}")
    if not bundle.audio_infos:
        print("  (no sounds configured, archive holds only the script and README)")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
