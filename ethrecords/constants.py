"""
ethrecords Constants

All record sizes, wire layout constants and curve parameters in one place.
"""

from typing import Final

# ==============================================================================
# FIXED-WIDTH VALUE SIZES (bytes)
# ==============================================================================

HASH_SIZE: Final[int] = 32                      # Keccak-256 digest
ADDRESS_SIZE: Final[int] = 20                   # Last 20 bytes of keccak(pubkey)
NONCE_SIZE: Final[int] = 8                      # Proof-of-work nonce
BLOOM_SIZE: Final[int] = 256                    # 2048-bit log bloom
TOPIC_SIZE: Final[int] = 4                      # Whisper topic
SIGNATURE_SIZE: Final[int] = 65                 # r || s || v
PRIVATE_KEY_SIZE: Final[int] = 32
PUBLIC_KEY_SIZE: Final[int] = 64                # x || y, uncompressed without prefix

BIG_ENDIAN: Final[str] = "big"

MAX_UINT32: Final[int] = 0xFFFFFFFF
MAX_UINT64: Final[int] = 0xFFFFFFFFFFFFFFFF
MAX_UINT256: Final[int] = (1 << 256) - 1

# ==============================================================================
# RLP
# ==============================================================================

RLP_SHORT_STRING_OFFSET: Final[int] = 0x80
RLP_LONG_STRING_OFFSET: Final[int] = 0xB7
RLP_SHORT_LIST_OFFSET: Final[int] = 0xC0
RLP_LONG_LIST_OFFSET: Final[int] = 0xF7
RLP_SHORT_PAYLOAD_MAX: Final[int] = 55          # Longest payload with a one-byte prefix
RLP_MAX_DEPTH: Final[int] = 64                  # List nesting accepted by the decoder

# Field counts of the consensus encodings
HEADER_FIELD_COUNT: Final[int] = 15
TRANSACTION_FIELD_COUNT: Final[int] = 9
BLOCK_FIELD_COUNT: Final[int] = 3
RECEIPT_FIELD_COUNT: Final[int] = 4
LOG_FIELD_COUNT: Final[int] = 3

# ==============================================================================
# WELL-KNOWN DIGESTS
# ==============================================================================

# keccak256(b"")
EMPTY_CODE_HASH: Final[bytes] = bytes.fromhex(
    "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
)
# keccak256(rlp([])), the uncle hash of a block without uncles
EMPTY_UNCLE_HASH: Final[bytes] = bytes.fromhex(
    "1dcc4de8dec75d7aab85b567b6ccd41ad312451b948a7413f0a142fd40d49347"
)
# keccak256(rlp(b"")), the root of an empty trie
EMPTY_ROOT_HASH: Final[bytes] = bytes.fromhex(
    "56e81f171bcc55a6ff8345e692c0f86e5b48e01b996cadc001622fb5e363b421"
)

# ==============================================================================
# SIGNATURES
# ==============================================================================

# secp256k1 group order
SECP256K1_N: Final[int] = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N: Final[int] = SECP256K1_N // 2

LEGACY_V_OFFSET: Final[int] = 27                # v = recid + 27
EIP155_V_OFFSET: Final[int] = 35                # v = recid + 35 + 2 * chain_id

CHAIN_ID_MAINNET: Final[int] = 1

# ==============================================================================
# RECEIPTS
# ==============================================================================

RECEIPT_STATUS_FAILED: Final[int] = 0
RECEIPT_STATUS_SUCCESSFUL: Final[int] = 1

RECEIPT_STATUS_FAILED_RLP: Final[bytes] = b""
RECEIPT_STATUS_SUCCESSFUL_RLP: Final[bytes] = b"\x01"

# ==============================================================================
# WHISPER
# ==============================================================================

WHISPER_DEFAULT_TTL: Final[int] = 50            # Seconds
WHISPER_DEFAULT_POW_TIME: Final[int] = 5        # Seconds
WHISPER_DEFAULT_POW_TARGET: Final[float] = 0.2
