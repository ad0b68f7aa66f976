"""h5stack output layout constants.

An export is a single HDF5 file holding one dataset:

    /<dataset>     — shape [T, Z, Y, X, C], chunked, gzip-compressed,
                     every dimension resizable
"""

# Axis order of the on-disk dataset
DIMENSION_ORDER = "tzyxc"

# File extension
FILE_EXTENSION = ".h5"

# Internal dataset path used when none is given
DEFAULT_DATASET = "exported_data"

# Compression settings
COMPRESSION = "gzip"
DEFAULT_COMPRESSION_LEVEL = 4  # gzip level 0-9
MIN_COMPRESSION_LEVEL = 0
MAX_COMPRESSION_LEVEL = 9

# Upper bound of a chunk along depth, rows and cols
CHUNK_LIMIT = 256

# Packed ARGB samples are split into this many uint8 planes
NUM_ARGB_CHANNELS = 4

# Alpha value written when an RGB source has no alpha plane (signed -1)
ALPHA_SENTINEL = 0xFF
