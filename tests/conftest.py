"""
Shared EMV QR payloads for the decoder tests.
"""

import pytest

from emv_crc import append_crc
from emv_tlv import encode_tlv


# =============================================================================
# Known-good payloads (CRC already embedded)
# =============================================================================

@pytest.fixture
def published_c2c_qr():
    """Widely circulated PromptPay sample whose embedded CRC (713E) does not match its data."""
    return "00020101021129370016A000000677010111021302455640030965802TH530376454071000.886304713E"


@pytest.fixture
def promptpay_c2c_qr(published_c2c_qr):
    """Static PromptPay transfer, merchant account under tag 29, with a correct CRC (EFD4)."""
    return append_crc(published_c2c_qr[:-8])


@pytest.fixture
def promptpay_c2b_qr():
    """PromptPay merchant payment with references and additional data."""
    return (
        "00020101021130750016A00000067701011201150107537000882050219ZY010556UP8013305E8"
        "0309MDMBEN38J53037645406900.045802TH622407200000yJMlWBD1ltXF6zJf6304858E"
    )


@pytest.fixture
def promptpay_dynamic_qr():
    return (
        "00020101021230870016A00000067701011201150205565052805020220ZYZRM7LJKIHW852LI6BJ"
        "0320LV182T0VX97RFFYNH7LK530376454031005802TH62240720PQRMGGT5EFY77KDP2QDI6304DBCF"
    )


@pytest.fixture
def compact_minimal_qr():
    return "010201630441C5"


# =============================================================================
# Builders
# =============================================================================

@pytest.fixture
def build_qr():
    """Builds a payload from (tag, value) pairs and appends a matching CRC."""
    def _build(*fields, with_crc=True):
        body = "".join(encode_tlv(tag, value) for tag, value in fields)
        return append_crc(body) if with_crc else body
    return _build
