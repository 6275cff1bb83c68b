import string


# Header layout (fixed 24 bytes, little endian)
#  - name[12]      NUL padded
#  - reserved u32  written as zero, ignored on read
#  - offset u32    absolute offset of the file data
#  - length u32    length of the file data
HEADER_SIZE = 24
NAME_FIELD_SIZE = 12

# Data chunks start on 4 byte boundaries, gaps are zero filled
DATA_ALIGNMENT = 4

MAX_NAME_LEN = NAME_FIELD_SIZE
MAX_U32 = 0xFFFFFFFF

# DOS style 8.3-ish names: letters, digits, space and a fixed punctuation set
NAME_CHARS = frozenset(
    (string.ascii_letters + string.digits + " !#$%&'()-@^_`{}~.").encode("ascii")
)
