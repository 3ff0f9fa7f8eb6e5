"""ASPH v4 — all format constants, keyed in one place.

Everything on-disk is derived from these values.  They are LOCKED for the
format: changing the magic, key, IV or record layout breaks every file
written by earlier builds.
"""

# ── Container ─────────────────────────────────────────────────────────────────
MAGIC           = b"ASPH"
MAGIC_LEN       = 4
VERSION         = 0x04     # current writer version
LEGACY_VERSION  = 0x01     # fixed 44.1 kHz / 16-bit / stereo variant

LENGTH_FIELD_LEN = 4                         # outer u32 encrypted_length
OUTER_HEADER_LEN = MAGIC_LEN + LENGTH_FIELD_LEN   # 8
INNER_HEADER_LEN = MAGIC_LEN + 1 + 3 * 4          # magic + version + 3×u32 = 17

# ── Cipher: AES-128-CBC, PKCS#7 ───────────────────────────────────────────────
# Fixed build-time key and IV.  This is confidentiality-by-obscurity only:
# every ASPH file shares them and nothing authenticates the ciphertext.
ENCRYPTION_KEY = bytes([
    0x21, 0x43, 0x65, 0x87, 0x09, 0xBA, 0xDC, 0xFE,
    0x13, 0x57, 0x9B, 0xDF, 0x02, 0x46, 0x8A, 0xCE,
])
INIT_VECTOR = bytes([
    0x12, 0x34, 0x56, 0x78, 0x90, 0xAB, 0xCD, 0xEF,
    0x11, 0x22, 0x33, 0x44, 0x55, 0x66, 0x77, 0x88,
])
AES_BLOCK_BITS = 128

# ── Compression ───────────────────────────────────────────────────────────────
# gzip member framing around DEFLATE; mtime pinned so output is deterministic.
GZIP_LEVEL = 9
GZIP_MTIME = 0

# ── Format negotiation bounds ─────────────────────────────────────────────────
MIN_SAMPLE_RATE     = 8_000
MAX_SAMPLE_RATE     = 96_000
MIN_BITS_PER_SAMPLE = 8
MAX_BITS_PER_SAMPLE = 24
MIN_CHANNELS        = 1
MAX_CHANNELS        = 2
DEFAULT_BITS        = 16    # substituted when a WAV header omits bit depth

SUPPORTED_BITS     = (8, 16, 24)
SUPPORTED_CHANNELS = (1, 2)

# Legacy v1 writer format (read-compatible only)
LEGACY_SAMPLE_RATE = 44_100
LEGACY_BITS        = 16
LEGACY_CHANNELS    = 2

# ── Metadata trailer ──────────────────────────────────────────────────────────
METADATA_SIZE = 512        # bytes at the end of the file
METADATA_LEN_PREFIX = 4    # u32le per field

# ── Playback ──────────────────────────────────────────────────────────────────
CHUNK_SIZE       = 4096    # bytes per sink write (rounded down to whole frames)
PAUSE_POLL_S     = 0.05    # bounded wait while paused
SEEK_SECONDS     = 10
VOLUME_STEP      = 0.1
COMMAND_QUEUE_SIZE = 32

PROGRESS_BAR_CELLS = 50
