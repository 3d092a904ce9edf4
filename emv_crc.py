# Purpose: CRC-16/CCITT-FALSE integrity checks for EMV QR payloads.
# Two strategies exist and are bound to different decoders; they must not be merged.

import logging
from enum import Enum

import crcmod.predefined

from emv_errors import CRCValidationFailed, TooShort

logger = logging.getLogger(__name__)

# --- CONFIGURATION ---
CRC_HEADER = "6304"
TRAILING_MIN_LENGTH = 14

_crc16_ccitt_false = crcmod.predefined.mkCrcFun("crc-ccitt-false")


class CRCVariant(Enum):
    EMV_TAGGED = "emv_tagged"  # used by decode()
    TRAILING = "trailing"  # used by parse_compact()


def calculate_crc(data_string):
    """Calculates the CRC-16/CCITT-FALSE (0xFFFF, 0x1021) for EMV QR."""
    crc = 0xFFFF
    polynomial = 0x1021
    data_bytes = data_string.encode('utf-8')

    for byte in data_bytes:
        crc ^= (byte << 8)
        for _ in range(8):
            if (crc & 0x8000):
                crc = (crc << 1) ^ polynomial
            else:
                crc = crc << 1
            crc &= 0xFFFF
    return f"{crc:04X}"


def append_crc(data_string):
    """Appends the CRC field (tag 63, length 04) to a payload built without one."""
    raw_str = data_string + CRC_HEADER
    return raw_str + calculate_crc(raw_str)


def validate_emv_crc(qr_string, crc_value):
    """Checks the CRC of a full EMV payload whose last field is 6304XXXX.

    The checksum covers everything up to and including the 6304 header.
    """
    header_pos = len(qr_string) - 8
    if header_pos < 0 or qr_string[header_pos:header_pos+4] != CRC_HEADER:
        raise CRCValidationFailed(
            None, crc_value,
            message="invalid EMV QR format: CRC tag not found at expected position",
        )

    calculated = calculate_crc(qr_string[:header_pos] + CRC_HEADER)
    if calculated != crc_value:
        raise CRCValidationFailed(calculated, crc_value)
    logger.debug("EMV CRC %s verified", calculated)


def validate_trailing_crc(qr_string):
    """Checks the last 4 characters against a CRC of everything before them.

    On mismatch `expected` is the computed checksum and `actual` the embedded
    one, the same as validate_emv_crc.
    """
    if len(qr_string) < TRAILING_MIN_LENGTH:
        raise TooShort("qr string too short")

    calculated = f"{_crc16_ccitt_false(qr_string[:-4].encode('utf-8')):04X}"
    embedded = qr_string[-4:]
    if calculated != embedded:
        raise CRCValidationFailed(calculated, embedded, message=f"invalid crc: expected {calculated}, got {embedded}")
    logger.debug("trailing CRC %s verified", calculated)


def validate_crc(qr_string, variant, crc_value=None):
    """Runs the named CRC strategy against qr_string."""
    if variant is CRCVariant.EMV_TAGGED:
        if crc_value is None:
            crc_value = qr_string[-4:]
        return validate_emv_crc(qr_string, crc_value)
    if variant is CRCVariant.TRAILING:
        return validate_trailing_crc(qr_string)
    raise ValueError(f"unknown CRC variant: {variant!r}")
