# =============================================================================
# constants.py — SMM Slot Tables, Mode Names and Container Constants
# =============================================================================
#
# Slot identifiers are the exact <NAME> segment vibe-kanban requests as
# /api/sounds/<NAME>.  The ORDER of SOUND_FILES is meaningful: it is the
# enumeration order of the export, and therefore the order of the entries
# inside every archive we build.  Do not sort it.
#
# ZIP and WAV values are fixed by the public formats (PKWARE APPNOTE 6.3,
# Microsoft RIFF/WAVE).  They are not tunables.

# -----------------------------------------------------------------------------
# SOUND SLOTS
# -----------------------------------------------------------------------------

SOUND_FILES = (
    "ABSTRACT_SOUND1",
    "ABSTRACT_SOUND2",
    "ABSTRACT_SOUND3",
    "ABSTRACT_SOUND4",
    "COW_MOOING",
    "PHONE_VIBRATION",
    "ROOSTER",
)

# Slot → filename vibe-kanban loads from its sounds directory.
# The export pre-places one normalized file under exactly this name.
SOUND_FILENAMES = {
    "ABSTRACT_SOUND1": "sound-abstract-sound1.wav",
    "ABSTRACT_SOUND2": "sound-abstract-sound2.wav",
    "ABSTRACT_SOUND3": "sound-abstract-sound3.wav",
    "ABSTRACT_SOUND4": "sound-abstract-sound4.wav",
    "COW_MOOING":      "sound-cow-mooing.wav",
    "PHONE_VIBRATION": "sound-phone-vibration.wav",
    "ROOSTER":         "sound-rooster.wav",
}

SOUND_DISPLAY_NAMES = {
    "ABSTRACT_SOUND1": "Abstract 1",
    "ABSTRACT_SOUND2": "Abstract 2",
    "ABSTRACT_SOUND3": "Abstract 3",
    "ABSTRACT_SOUND4": "Abstract 4",
    "COW_MOOING":      "Cow",
    "PHONE_VIBRATION": "Vibration",
    "ROOSTER":         "Rooster",
}

# Path prefix the interceptor recognises in a playback URL
SOUND_URL_PATTERN = r"/api/sounds/([A-Z0-9_]+)"

# Directory inside the archive that holds every normalized source file
SOUNDS_DIR = "sounds"


# -----------------------------------------------------------------------------
# PLAY MODES
# -----------------------------------------------------------------------------

MODE_SINGLE   = "single"
MODE_RANDOM   = "random"
MODE_SEQUENCE = "sequence"
MODE_WEIGHTED = "weighted"

PLAY_MODES = (MODE_SINGLE, MODE_RANDOM, MODE_SEQUENCE, MODE_WEIGHTED)

MODE_DISPLAY_NAMES = {
    MODE_SINGLE:   "Single",
    MODE_RANDOM:   "Random",
    MODE_SEQUENCE: "Sequence",
    MODE_WEIGHTED: "Weighted",
}

DEFAULT_WEIGHT = 1   # used for unset or non-positive weights


# -----------------------------------------------------------------------------
# DEFAULT PRESET
# -----------------------------------------------------------------------------
# Shipped so a fresh install audibly does something on the cow notification.

DEFAULT_PRESET_SLOT = "COW_MOOING"
DEFAULT_PRESET_SOURCE = {
    "url":    "https://github.com/FoskyM/vibe-kanban-sound-replacer/raw/main/source/ciallo.mp3",
    "weight": 1,
    "name":   "Ciallo～(∠・ω< )⌒☆",
}


# -----------------------------------------------------------------------------
# CANONICAL WAV  (RIFF / WAVE, PCM)
# -----------------------------------------------------------------------------

WAV_HEADER_SIZE     = 44          # RIFF(12) + fmt (24) + data hdr(8)
WAV_FMT_CHUNK_SIZE  = 16          # PCM fmt chunk body
WAV_FORMAT_PCM      = 1
WAV_BITS_PER_SAMPLE = 16
WAV_BYTES_PER_SAMPLE = WAV_BITS_PER_SAMPLE // 8

# Asymmetric int16 scaling: negatives reach -32768, positives stop at 32767.
PCM16_NEG_SCALE = 32768
PCM16_POS_SCALE = 32767


# -----------------------------------------------------------------------------
# ZIP (store-only, ZIP32)
# -----------------------------------------------------------------------------

ZIP_LOCAL_HEADER_SIG   = b"PK\x03\x04"
ZIP_CENTRAL_HEADER_SIG = b"PK\x01\x02"
ZIP_END_OF_DIR_SIG     = b"PK\x05\x06"

ZIP_VERSION        = 20           # 2.0 — both "made by" and "needed"
ZIP_FLAGS          = 0
ZIP_METHOD_STORE   = 0

ZIP_LOCAL_HEADER_SIZE   = 30      # fixed part, before the filename
ZIP_CENTRAL_HEADER_SIZE = 46      # fixed part, before the filename
ZIP_END_OF_DIR_SIZE     = 22      # with a zero-length comment

DOS_EPOCH_YEAR = 1980

# Reflected IEEE 802.3 polynomial — the ZIP / PNG / zlib CRC
CRC32_POLYNOMIAL = 0xEDB88320
