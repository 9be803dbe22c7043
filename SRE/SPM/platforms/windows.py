# =============================================================================
# windows.py — PowerShell Driver-script Generator
# =============================================================================
#
# The desktop notification player loads sound-<name>.wav straight from
# disk, so it cannot be intercepted in-process.  The generated script does
# the selection itself: on every run it picks one file from sounds\ per
# slot (same four rules as SSM/selector.py) and copies it over the target.
#
# Sequence cursors persist in .vksr-state.json beside the script:
#   { "sound-rooster.wav": 2, ... }
#
# Slot table embedded in the script:
#   @{ Target = '<file>'; Mode = '<mode>';
#      Sources = @('<base>_0.wav', ...); Weights = @(1, ...) }
# =============================================================================

from __future__ import annotations

from SRE import __version__
from .base import AudioFileInfo, PlatformScriptGenerator

_TABLE_MARKER = "@@VKSR_SOUNDS@@"

_SCRIPT_TEMPLATE = r"""# vksr-replace.ps1 - generated by Sound Replacement Engine @@VKSR_VERSION@@
# Copies one configured sound over each vibe-kanban notification file.
# Keep this script next to the sounds\ folder it was exported with.

param(
    [string]$TargetDir = $PSScriptRoot,
    [switch]$Loop,
    [int]$IntervalSeconds = 5
)

$ErrorActionPreference = 'Stop'
$SoundsDir = Join-Path $PSScriptRoot 'sounds'
$StateFile = Join-Path $PSScriptRoot '.vksr-state.json'

$Sounds = @(
@@VKSR_SOUNDS@@
)

function Read-State {
    $state = @{}
    if (Test-Path -LiteralPath $StateFile) {
        try {
            $json = Get-Content -LiteralPath $StateFile -Raw | ConvertFrom-Json
            foreach ($p in $json.PSObject.Properties) { $state[$p.Name] = [int]$p.Value }
        } catch {
            Write-Warning "Ignoring unreadable state file: $StateFile"
        }
    }
    return $state
}

function Save-State($state) {
    $state | ConvertTo-Json | Set-Content -LiteralPath $StateFile -Encoding UTF8
}

function Select-Source($sound, $state) {
    $sources = @($sound.Sources)
    $count = $sources.Count
    if ($count -eq 0) { return $null }

    switch ($sound.Mode) {
        'random' {
            return $sources[(Get-Random -Minimum 0 -Maximum $count)]
        }
        'sequence' {
            $cursor = 0
            if ($state.ContainsKey($sound.Target)) { $cursor = [int]$state[$sound.Target] }
            $index = $cursor % $count
            $state[$sound.Target] = ($index + 1) % $count
            Save-State $state
            return $sources[$index]
        }
        'weighted' {
            $weights = @($sound.Weights)
            $total = 0
            foreach ($w in $weights) { $total += $w }
            $draw = (Get-Random -Minimum 0.0 -Maximum 1.0) * $total
            for ($i = 0; $i -lt $count; $i++) {
                $draw -= $weights[$i]
                if ($draw -le 0) { return $sources[$i] }
            }
            return $sources[0]
        }
        default {
            return $sources[0]
        }
    }
}

function Invoke-Replacement {
    $state = Read-State
    foreach ($sound in $Sounds) {
        $choice = Select-Source $sound $state
        if (-not $choice) { continue }

        $from = Join-Path $SoundsDir $choice
        $to = Join-Path $TargetDir $sound.Target
        if (-not (Test-Path -LiteralPath $from)) {
            Write-Warning "Missing source file: $from"
            continue
        }
        Copy-Item -LiteralPath $from -Destination $to -Force
        Write-Host "[VKSR] $($sound.Target) <- $choice"
    }
}

if ($Loop) {
    while ($true) {
        Invoke-Replacement
        Start-Sleep -Seconds $IntervalSeconds
    }
} else {
    Invoke-Replacement
}
"""

_README = """# Vibe Kanban Sound Replacer - Windows package

This archive replaces the vibe-kanban notification sounds outside the
browser, using the same sources and play modes you configured.

## Contents

| Path | Purpose |
|---|---|
| `sound-*.wav` | One ready-to-use file per configured sound (its first source) |
| `sounds/` | Every configured source, converted to 16-bit PCM WAV |
| `vksr-replace.ps1` | Picks a source per sound and copies it into place |
| `README.md` | This file |

## Install

1. Extract the archive into the folder where vibe-kanban keeps its
   `sound-*.wav` files (or anywhere, and pass `-TargetDir` below).
2. The pre-placed `sound-*.wav` files already work. Stop here if every
   sound uses a single source.
3. For random, sequence or weighted sounds, run the script after each
   notification, or keep it running:

```powershell
powershell -ExecutionPolicy Bypass -File .\\vksr-replace.ps1
powershell -ExecutionPolicy Bypass -File .\\vksr-replace.ps1 -Loop -IntervalSeconds 5
powershell -ExecutionPolicy Bypass -File .\\vksr-replace.ps1 -TargetDir "C:\\path\\to\\sounds"
```

## Play modes

- **single**: always the first source
- **random**: a uniformly random source each run
- **sequence**: sources in order, wrapping around; the position is kept in
  `.vksr-state.json` next to the script (delete it to start over)
- **weighted**: random, proportional to each source's weight

To run it automatically, create a Task Scheduler task that starts the
script with `-Loop` at log on.
"""


def _ps_quote(value: str) -> str:
    """Single-quoted PowerShell literal ('' escapes a quote)."""
    return "'" + value.replace("'", "''") + "'"


def _ps_row(info: AudioFileInfo) -> str:
    sources = ", ".join(_ps_quote(s) for s in info.source_files)
    weights = ", ".join(str(int(w)) for w in info.weights)
    return (
        f"    @{{ Target = {_ps_quote(info.target_filename)}; "
        f"Mode = {_ps_quote(info.mode)}; "
        f"Sources = @({sources}); "
        f"Weights = @({weights}) }}"
    )


class WindowsScriptGenerator(PlatformScriptGenerator):
    platform = "windows"
    script_filename = "vksr-replace.ps1"

    def generate_script(self, audio_infos: list[AudioFileInfo]) -> str:
        table = ",\n".join(_ps_row(info) for info in audio_infos)
        return (_SCRIPT_TEMPLATE
                .replace("@@VKSR_VERSION@@", __version__)
                .replace(_TABLE_MARKER, table))

    def generate_readme(self) -> str:
        return _README


windows_generator = WindowsScriptGenerator()
