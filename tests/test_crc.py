"""
Tests for the two CRC-16/CCITT-FALSE strategies.
"""

import re

import pytest

from emv_crc import (
    CRCVariant,
    append_crc,
    calculate_crc,
    validate_crc,
    validate_emv_crc,
    validate_trailing_crc,
)
from emv_errors import CRCValidationFailed, TooShort


def test_calculate_crc_check_value():
    # Standard check value of CRC-16/CCITT-FALSE
    assert calculate_crc("123456789") == "29B1"


def test_calculate_crc_of_empty_input_is_init_value():
    assert calculate_crc("") == "FFFF"


@pytest.mark.parametrize("data", ["", "6304", "00020101021129370016A000000677010111"])
def test_calculate_crc_format(data):
    assert re.fullmatch(r"[0-9A-F]{4}", calculate_crc(data))


def test_append_crc_adds_crc_field():
    qr = append_crc("000201")
    assert qr[:10] == "0002016304"
    assert qr[-4:] == calculate_crc("0002016304")


def test_emv_crc_accepts_known_payload(promptpay_c2c_qr):
    validate_emv_crc(promptpay_c2c_qr, "EFD4")


def test_emv_crc_reports_expected_and_actual(promptpay_c2c_qr):
    tampered = promptpay_c2c_qr[:-4] + "FFFF"
    with pytest.raises(CRCValidationFailed) as exc:
        validate_emv_crc(tampered, "FFFF")
    assert exc.value.expected == "EFD4"
    assert exc.value.actual == "FFFF"
    assert "invalid CRC" in str(exc.value)


def test_emv_crc_is_case_sensitive(promptpay_c2c_qr):
    lowered = promptpay_c2c_qr[:-4] + "efd4"
    with pytest.raises(CRCValidationFailed):
        validate_emv_crc(lowered, "efd4")


def test_emv_crc_requires_header_before_value():
    with pytest.raises(CRCValidationFailed) as exc:
        validate_emv_crc("0002016304ABCD5802TH", "ABCD")
    assert exc.value.expected is None
    assert "CRC tag not found" in str(exc.value)


def test_emv_crc_detects_every_single_character_change(promptpay_c2b_qr):
    covered = promptpay_c2b_qr[:-4]
    original = calculate_crc(covered)
    for i, ch in enumerate(covered):
        mutated = covered[:i] + chr(ord(ch) ^ 0x01) + covered[i+1:]
        assert calculate_crc(mutated) != original, f"undetected change at position {i}"


def test_trailing_crc_accepts_minimal_payload(compact_minimal_qr):
    validate_trailing_crc(compact_minimal_qr)


@pytest.mark.parametrize("qr", ["", "0102015400", "123456789", "0102016304415"])
def test_trailing_crc_too_short(qr):
    with pytest.raises(TooShort) as exc:
        validate_trailing_crc(qr)
    assert "qr string too short" in str(exc.value)


def test_trailing_crc_mismatch():
    with pytest.raises(CRCValidationFailed) as exc:
        validate_trailing_crc("010201630441C6")
    assert exc.value.expected == "41C5"
    assert exc.value.actual == "41C6"
    assert str(exc.value) == "invalid crc: expected 41C5, got 41C6"


def test_variants_agree_on_well_formed_payloads(build_qr):
    qr = build_qr(("00", "01"), ("01", "11"), ("58", "TH"), ("53", "764"))
    validate_crc(qr, CRCVariant.EMV_TAGGED)
    validate_crc(qr, CRCVariant.TRAILING)


def test_variants_differ_on_coverage():
    # Trailing strategy does not look for a 6304 header.
    qr = "0102015802TH"
    qr = qr + calculate_crc(qr)
    validate_crc(qr, CRCVariant.TRAILING)
    with pytest.raises(CRCValidationFailed):
        validate_crc(qr, CRCVariant.EMV_TAGGED)


def test_validate_crc_rejects_unknown_variant(compact_minimal_qr):
    with pytest.raises(ValueError):
        validate_crc(compact_minimal_qr, "trailing")
