"""
ethrecords Error Handling

All error codes and exception classes.
"""

from enum import IntEnum
from typing import Optional, Any


class ErrorCode(IntEnum):
    """Library error codes."""

    # 1xxx - General errors
    UNKNOWN_ERROR = 1000
    INVALID_PARAMETER = 1001

    # 2xxx - Encoding errors
    MALFORMED_ENCODING = 2001

    # 3xxx - Collection errors
    INDEX_OUT_OF_BOUNDS = 3001

    # 4xxx - Signer errors
    INVALID_SIGNATURE_LENGTH = 4001
    MISSING_SIGNATURE = 4002
    INVALID_SIGNATURE = 4003
    INVALID_CHAIN_ID = 4004

    # 5xxx - Key errors
    INVALID_PRIVATE_KEY = 5001

    # 6xxx - Configuration errors
    INVALID_CONFIG = 6001


class EthRecordsError(Exception):
    """Base exception for all ethrecords errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        result = {
            "code": self.code.value,
            "name": self.code.name,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


# ==============================================================================
# General Errors (1xxx)
# ==============================================================================

class InvalidParameterError(EthRecordsError):
    def __init__(self, param: str, message: str = ""):
        msg = f"Invalid parameter: {param}"
        if message:
            msg += f" - {message}"
        super().__init__(ErrorCode.INVALID_PARAMETER, msg, {"parameter": param})


# ==============================================================================
# Encoding Errors (2xxx)
# ==============================================================================

class MalformedEncodingError(EthRecordsError):
    """Raised when RLP bytes or JSON text do not match the expected shape."""

    def __init__(self, reason: str, fmt: str = "rlp", field: Optional[str] = None):
        msg = f"Malformed {fmt} encoding"
        if field:
            msg += f" in {field}"
        msg += f": {reason}"
        details = {"format": fmt, "reason": reason}
        if field:
            details["field"] = field
        super().__init__(ErrorCode.MALFORMED_ENCODING, msg, details)


# ==============================================================================
# Collection Errors (3xxx)
# ==============================================================================

class IndexOutOfBoundsError(EthRecordsError):
    def __init__(self, index: int, size: int):
        super().__init__(
            ErrorCode.INDEX_OUT_OF_BOUNDS,
            f"Index out of bounds: {index} (size: {size})",
            {"index": index, "size": size}
        )


# ==============================================================================
# Signer Errors (4xxx)
# ==============================================================================

class InvalidSignatureLengthError(EthRecordsError):
    def __init__(self, length: int, expected: int):
        super().__init__(
            ErrorCode.INVALID_SIGNATURE_LENGTH,
            f"Invalid signature length: {length} (expected: {expected})",
            {"length": length, "expected": expected}
        )


class MissingSignatureError(EthRecordsError):
    def __init__(self):
        super().__init__(
            ErrorCode.MISSING_SIGNATURE,
            "Transaction carries no signature"
        )


class InvalidSignatureError(EthRecordsError):
    def __init__(self, reason: str = "", code: ErrorCode = ErrorCode.INVALID_SIGNATURE,
                 details: Any = None):
        msg = "Invalid signature"
        if reason:
            msg += f": {reason}"
        super().__init__(code, msg, details)


class InvalidChainIdError(InvalidSignatureError):
    def __init__(self, chain_id: Optional[int], expected: Optional[int] = None):
        if expected is None:
            reason = f"invalid chain id {chain_id}"
        else:
            reason = f"chain id {chain_id} does not match signer chain id {expected}"
        super().__init__(
            reason,
            ErrorCode.INVALID_CHAIN_ID,
            {"chain_id": chain_id, "expected": expected}
        )


# ==============================================================================
# Key Errors (5xxx)
# ==============================================================================

class InvalidPrivateKeyError(EthRecordsError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.INVALID_PRIVATE_KEY,
            f"Invalid private key: {reason}"
        )


# ==============================================================================
# Configuration Errors (6xxx)
# ==============================================================================

class InvalidConfigError(EthRecordsError):
    def __init__(self, problems: list):
        super().__init__(
            ErrorCode.INVALID_CONFIG,
            f"Invalid configuration: {'; '.join(problems)}",
            {"problems": problems}
        )
