# Purpose: Decode EMVCo merchant-presented QR payloads into structured records.
# Two grammars are supported: the full EMV payload (decode) and the compact
# PromptPay-style string (parse_compact); each has its own CRC strategy.

import logging
from dataclasses import dataclass, field

from emv_crc import CRCVariant, validate_crc
from emv_errors import TooShort
from emv_fields import (
    POIMethodType,
    check_field,
    classify_field,
    describe_tag,
    is_merchant_account_tag,
    parse_nested,
    parse_sub_fields,
)
from emv_tlv import tokenize

logger = logging.getLogger(__name__)

# --- CONFIGURATION ---
MIN_QR_LENGTH = 4
# Markers that precede the proxy (phone or national ID) inside a PromptPay tag 29.
PHONE_PREFIXES = ("011300", "110213")


@dataclass
class DecodedPayload:
    payload_format_indicator: str = ""
    point_of_initiation_method: str = ""
    poi_method_type: POIMethodType = POIMethodType.UNKNOWN
    merchant_account_info: dict = field(default_factory=dict)
    merchant_category_code: str = ""
    transaction_currency: str = ""
    transaction_amount: str = ""
    tip_or_convenience_indicator: str = ""
    value_of_convenience_fee: str = ""
    country_code: str = ""
    merchant_name: str = ""
    merchant_city: str = ""
    postal_code: str = ""
    additional_data: dict = field(default_factory=dict)
    merchant_information: dict = field(default_factory=dict)
    crc: str = ""
    unresolved_data: dict = field(default_factory=dict)

    def to_dict(self):
        return {
            "payload_format_indicator": self.payload_format_indicator,
            "point_of_initiation_method": self.point_of_initiation_method,
            "poi_method_type": self.poi_method_type.value,
            "merchant_account_info": {
                tag: account.to_dict() for tag, account in self.merchant_account_info.items()
            },
            "merchant_category_code": self.merchant_category_code,
            "transaction_currency": self.transaction_currency,
            "transaction_amount": self.transaction_amount,
            "tip_or_convenience_indicator": self.tip_or_convenience_indicator,
            "value_of_convenience_fee": self.value_of_convenience_fee,
            "country_code": self.country_code,
            "merchant_name": self.merchant_name,
            "merchant_city": self.merchant_city,
            "postal_code": self.postal_code,
            "additional_data": dict(self.additional_data),
            "merchant_information": dict(self.merchant_information),
            "crc": self.crc,
            "unresolved_data": dict(self.unresolved_data),
        }


@dataclass
class CompactInfo:
    format: str = ""
    merchant_account: str = ""
    amount: str = ""
    phone_number: str = ""
    country_code: str = ""
    crc: str = ""
    currency_iso4217: str = ""
    biller_id: str = ""
    ref1: str = ""
    ref2: str = ""
    ref3: str = ""

    def to_dict(self):
        return {
            "format": self.format,
            "merchant_account": self.merchant_account,
            "amount": self.amount,
            "phone_number": self.phone_number,
            "country_code": self.country_code,
            "crc": self.crc,
            "currency_iso4217": self.currency_iso4217,
            "biller_id": self.biller_id,
            "ref1": self.ref1,
            "ref2": self.ref2,
            "ref3": self.ref3,
        }


def _require_length(qr_string):
    if len(qr_string) < MIN_QR_LENGTH:
        raise TooShort("invalid EMV QR code: too short")


def decode(qr_string):
    """Decodes an EMV QR string and validates its CRC when a CRC field is present."""
    _require_length(qr_string)

    payload = DecodedPayload()
    triplets = tokenize(qr_string)
    for triplet in triplets:
        classify_field(payload, triplet.tag, triplet.value)
    logger.debug("decoded %d top-level fields, %d merchant accounts",
                 len(triplets), len(payload.merchant_account_info))

    if payload.crc:
        validate_crc(qr_string, CRCVariant.EMV_TAGGED, crc_value=payload.crc)
    return payload


def parse_flat(qr_string):
    """Returns the raw top-level triplets without classification or CRC check."""
    _require_length(qr_string)
    return tokenize(qr_string)


def describe_flat(qr_string):
    """Parses EMV TLV data and returns a list of annotated field dictionaries.

    Merchant account templates (02-51) and additional data (62) are expanded
    into "subfields" one level down.
    """
    results = []
    for triplet in parse_flat(qr_string):
        is_valid, msg = check_field(triplet.tag, triplet.value)
        entry = {
            "tag": triplet.tag,
            "length": triplet.length,
            "value": triplet.value,
            "description": describe_tag(triplet.tag),
            "is_valid": is_valid,
            "validation_msg": msg,
        }
        if triplet.tag == "62" or is_merchant_account_tag(triplet.tag):
            entry["subfields"] = []
            for sub in parse_nested(triplet.tag, triplet.value):
                sub_valid, sub_msg = check_field(sub.tag, sub.value, parent_tag=triplet.tag)
                entry["subfields"].append({
                    "tag": sub.tag,
                    "length": sub.length,
                    "value": sub.value,
                    "description": describe_tag(sub.tag, parent_tag=triplet.tag),
                    "is_valid": sub_valid,
                    "validation_msg": sub_msg,
                })
        results.append(entry)
    return results


def _find_phone_number(value):
    for prefix in PHONE_PREFIXES:
        index = value.find(prefix)
        if index != -1:
            return value[index + len(prefix):]
    return ""


def parse_compact(qr_string):
    """Parses the compact QR grammar: trailing CRC first, then a fixed set of tags."""
    validate_crc(qr_string, CRCVariant.TRAILING)

    info = CompactInfo()
    for triplet in tokenize(qr_string):
        tag, value = triplet.tag, triplet.value
        if tag == "01":
            info.format = value
        elif tag == "29":
            info.merchant_account = value
            info.phone_number = _find_phone_number(value)
        elif tag == "30":
            info.merchant_account = value
            sub_fields = parse_sub_fields(tag, value)
            info.biller_id = sub_fields.get("01", info.biller_id)
            info.ref1 = sub_fields.get("02", info.ref1)
            info.ref2 = sub_fields.get("03", info.ref2)
        elif tag == "53":
            info.currency_iso4217 = value
        elif tag == "54":
            info.amount = value
        elif tag == "58":
            info.country_code = value
        elif tag == "62":
            # Skips the first sub-field's tag and length.
            if len(value) > 4:
                info.ref3 = value[4:]
        elif tag == "63":
            info.crc = value
    return info
