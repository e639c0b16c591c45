# Magic and version
FSEQ_MAGIC = b"PSEQ"  # 4 bytes: "PSEQ"

VERSION_MAJOR = 2
VERSION_MINOR = 0

# Fixed header
HEADER_SIZE = 32

# Variable records: size u16 || code[2] || data
VAR_SIZE_LEN = 2
VAR_CODE_LEN = 2
VAR_HEADER_LEN = VAR_SIZE_LEN + VAR_CODE_LEN
VAR_BLOCK_ALIGN = 4
# Codes are two raw bytes; latin-1 maps every byte to one character
VAR_CODE_ENCODING = "latin-1"

# Integer limits of the on-disk fields
U8_MAX = 0xFF
U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF
U64_MAX = 0xFFFFFFFFFFFFFFFF

VAR_MAX_DATA_LEN = U16_MAX - VAR_HEADER_LEN
MAX_STEP_TIME_MS = U8_MAX

# Frame dump rendering
DEFAULT_DUMP_CHANNELS = 64
DUMP_OFFSET_WIDTH = 9
DUMP_BLANK_CHANNEL = "   "
DUMP_TRUNCATED_MARK = " ..."
