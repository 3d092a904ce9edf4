"""
Tests for JSON Schema validation of serialized records.
"""

import pytest
from jsonschema import ValidationError

from emv_decoder import decode, parse_compact, parse_flat
from emv_schema import load_schema_document, validate_against_schema
from emv_summary import project


def test_schema_document_lists_all_records():
    schemas = load_schema_document()["components"]["schemas"]
    for name in ("Triplet", "TripletList", "MerchantAccount", "DecodedPayload", "ConsolidatedView", "CompactInfo"):
        assert name in schemas


def test_decoded_payload_matches_schema(promptpay_c2b_qr):
    payload = decode(promptpay_c2b_qr)
    validate_against_schema(payload.to_dict(), "DecodedPayload")
    validate_against_schema(project(payload).to_dict(), "ConsolidatedView")


def test_flat_and_compact_match_schema(promptpay_c2c_qr, compact_minimal_qr):
    validate_against_schema([t.to_dict() for t in parse_flat(promptpay_c2c_qr)], "TripletList")
    validate_against_schema(parse_compact(compact_minimal_qr).to_dict(), "CompactInfo")


def test_schema_rejects_unknown_enum_value(promptpay_c2c_qr):
    data = decode(promptpay_c2c_qr).to_dict()
    data["merchant_account_info"]["29"]["aid_type"] = "P2P"
    with pytest.raises(ValidationError):
        validate_against_schema(data, "DecodedPayload")


def test_schema_rejects_missing_field(promptpay_c2c_qr):
    data = project(decode(promptpay_c2c_qr)).to_dict()
    del data["reference_1"]
    with pytest.raises(ValidationError):
        validate_against_schema(data, "ConsolidatedView")


def test_unknown_schema_name():
    with pytest.raises(KeyError):
        validate_against_schema({}, "PaymentRequest")
