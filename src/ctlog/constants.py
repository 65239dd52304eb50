# https://tools.ietf.org/html/rfc6962
VERSION_LENGTH = 1
KEY_ID_LENGTH = 32
TIMESTAMP_LENGTH = 8
HASH_ALGORITHM_LENGTH = 1
SIGNATURE_ALGORITHM_LENGTH = 1
LEAF_TYPE_LENGTH = 1
LOG_ENTRY_TYPE_LENGTH = 2
ISSUER_KEY_HASH_LENGTH = 32

MAX_EXTENSIONS_LENGTH = (1 << 16) - 1
MAX_SIGNATURE_LENGTH = (1 << 16) - 1
MAX_CERTIFICATE_LENGTH = (1 << 24) - 1
# The TBS certificate of a precert entry carries a 2-byte length prefix on the wire.
MAX_TBS_CERTIFICATE_LENGTH = (1 << 16) - 1
MAX_CHAIN_LENGTH = (1 << 24) - 1
MAX_SCT_LIST_LENGTH = (1 << 16) - 1
MAX_SERIALIZED_SCT_LENGTH = (1 << 16) - 1

TIMESTAMPED_ENTRY_LEAF_TYPE = 0

# Numbers are assembled into a 64-bit unsigned value at most.
MAX_NUMBER_LENGTH = 8
