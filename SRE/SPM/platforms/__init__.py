# =============================================================================
# SRE/SPM/platforms — Driver-script Generators
# =============================================================================
#
# One generator per target OS.  Only Windows (PowerShell) is implemented;
# macOS and Linux are known names that fail explicitly until a generator is
# registered for them.
#
#   get_generator("windows")  → WindowsScriptGenerator
#   get_generator("macos")    → UnsupportedPlatformError ("not yet supported")
#   get_generator("beos")     → UnsupportedPlatformError ("Unknown platform")
# =============================================================================

from .base import PLATFORM_NAMES, AudioFileInfo, PlatformScriptGenerator
from .windows import WindowsScriptGenerator, windows_generator


class UnsupportedPlatformError(ValueError):
    """Raised for a platform that has no script generator."""


_GENERATORS: dict[str, PlatformScriptGenerator] = {
    windows_generator.platform: windows_generator,
}


def get_generator(platform: str) -> PlatformScriptGenerator:
    key = (platform or "").lower()
    generator = _GENERATORS.get(key)
    if generator is not None:
        return generator
    if key in PLATFORM_NAMES:
        raise UnsupportedPlatformError(
            f"Platform {PLATFORM_NAMES[key]} is not yet supported")
    raise UnsupportedPlatformError(f"Unknown platform: {platform}")


def available_platforms() -> list[str]:
    return list(_GENERATORS)


__all__ = [
    "AudioFileInfo",
    "PLATFORM_NAMES",
    "PlatformScriptGenerator",
    "UnsupportedPlatformError",
    "WindowsScriptGenerator",
    "available_platforms",
    "get_generator",
]
