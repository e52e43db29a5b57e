# Local constants
MAX_BLOCK_GAS_LIMIT = 30_000_000
# Callback gas limit is passed to the oracle as uint32
UINT32_MAX = 2**32 - 1
