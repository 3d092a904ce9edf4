# Purpose: Map EMV QR tags to structured fields and classify payment identifiers.
# Lookup tables are module constants and are never mutated after import.

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from emv_errors import EMVError
from emv_tlv import tokenize


class AIDType(str, Enum):
    C2C = "C2C"  # Consumer-to-Consumer transfer
    C2B = "C2B"  # Consumer-to-Business (merchant presented)
    BILL_PAYMENT = "BillPayment"
    CROSS_BORDER = "CrossBorder"
    UNKNOWN = "Unknown"


class PaymentScheme(str, Enum):
    PROMPTPAY = "PromptPay"  # Thailand
    QRIS = "QRIS"  # Indonesia
    DUITNOW = "DuitNow"  # Malaysia
    UPI = "UPI"  # India
    NETS = "NETS"  # Singapore
    ALIPAY = "Alipay"
    WECHAT_PAY = "WeChatPay"
    UNKNOWN = "Unknown"


class POIMethodType(str, Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"
    UNKNOWN = "unknown"


SCHEME_BY_AID = MappingProxyType({
    "A000000677010111": PaymentScheme.PROMPTPAY,
    "A000000677010112": PaymentScheme.PROMPTPAY,
    "A000000677010113": PaymentScheme.PROMPTPAY,
    "A000000677010114": PaymentScheme.PROMPTPAY,
    "ID.CO.QRIS.WWW": PaymentScheme.QRIS,
    "COM.INACASH.WWW": PaymentScheme.QRIS,
    "COM.MY.DUITNOW": PaymentScheme.DUITNOW,
    "COM.UPI.PAY": PaymentScheme.UPI,
    "COM.SG.NETS": PaymentScheme.NETS,
    "COM.ALIPAY.WWW": PaymentScheme.ALIPAY,
    "COM.WECHAT.WWW": PaymentScheme.WECHAT_PAY,
})

# Only PromptPay AIDs carry a payment type.
AID_TYPE_BY_AID = MappingProxyType({
    "A000000677010111": AIDType.C2C,
    "A000000677010112": AIDType.C2B,
    "A000000677010113": AIDType.BILL_PAYMENT,
    "A000000677010114": AIDType.CROSS_BORDER,
})

POI_METHOD_TYPES = MappingProxyType({
    "11": POIMethodType.STATIC,
    "12": POIMethodType.DYNAMIC,
})

# Top-level tags that map onto a single string attribute of the decoded payload.
SCALAR_FIELDS = MappingProxyType({
    "00": "payload_format_indicator",
    "52": "merchant_category_code",
    "53": "transaction_currency",
    "54": "transaction_amount",
    "55": "tip_or_convenience_indicator",
    "56": "value_of_convenience_fee",
    "58": "country_code",
    "59": "merchant_name",
    "60": "merchant_city",
    "61": "postal_code",
    "63": "crc",
})

ACCOUNT_FIELDS = MappingProxyType({
    "01": "merchant_id",
    "02": "reference_1",
    "03": "reference_2",
    "04": "reference_3",
})

# EMV Tag Definitions and Basic Validation Rules
TAG_INFO = MappingProxyType({
    "00": {"desc": "Payload Format Indicator", "min_len": 2, "max_len": 2, "pattern": r"^01$"},
    "01": {"desc": "Point of Initiation Method", "min_len": 2, "max_len": 2, "pattern": r"^(11|12)$"},
    "52": {"desc": "Merchant Category Code (MCC)", "min_len": 4, "max_len": 4, "pattern": r"^\d{4}$"},
    "53": {"desc": "Transaction Currency", "min_len": 3, "max_len": 3, "pattern": r"^\d{3}$"},
    "54": {"desc": "Transaction Amount", "min_len": 1, "max_len": 13, "pattern": r"^\d+(\.\d*)?$"},
    "55": {"desc": "Tip or Convenience Indicator", "min_len": 2, "max_len": 2, "pattern": r"^0[1-3]$"},
    "56": {"desc": "Value of Convenience Fee Fixed", "min_len": 1, "max_len": 13, "pattern": r"^\d+(\.\d*)?$"},
    "57": {"desc": "Value of Convenience Fee Percentage", "min_len": 1, "max_len": 5},
    "58": {"desc": "Country Code", "min_len": 2, "max_len": 2, "pattern": r"^[A-Z]{2}$"},
    "59": {"desc": "Merchant Name", "min_len": 1, "max_len": 25},
    "60": {"desc": "Merchant City", "min_len": 1, "max_len": 15},
    "61": {"desc": "Postal Code", "min_len": 1, "max_len": 10},
    "62": {"desc": "Additional Data Field Template", "min_len": 1, "max_len": 99},
    "63": {"desc": "CRC", "min_len": 4, "max_len": 4, "pattern": r"^[0-9A-F]{4}$"},
    "64": {"desc": "Merchant Information - Language Template", "min_len": 1, "max_len": 99},
})

SUBTAG_INFO = MappingProxyType({
    "account": MappingProxyType({
        "00": {"desc": "Globally Unique Identifier (AID)", "min_len": 1, "max_len": 32},
        "01": {"desc": "Merchant ID"},
        "02": {"desc": "Reference 1"},
        "03": {"desc": "Reference 2"},
        "04": {"desc": "Reference 3"},
    }),
    "62": MappingProxyType({
        "01": {"desc": "Bill Number", "min_len": 1, "max_len": 25},
        "02": {"desc": "Mobile Number", "min_len": 1, "max_len": 25},
        "03": {"desc": "Store Label", "min_len": 1, "max_len": 25},
        "04": {"desc": "Loyalty Number", "min_len": 1, "max_len": 25},
        "05": {"desc": "Reference Label", "min_len": 1, "max_len": 25},
        "06": {"desc": "Customer Label", "min_len": 1, "max_len": 25},
        "07": {"desc": "Terminal Label", "min_len": 1, "max_len": 25},
        "08": {"desc": "Purpose of Transaction", "min_len": 1, "max_len": 25},
        "09": {"desc": "Additional Consumer Data Request", "min_len": 1, "max_len": 3, "pattern": r"^[AME]+$"},
    }),
})


def _tag_number(tag):
    return int(tag) if len(tag) == 2 and tag.isascii() and tag.isdigit() else None


def is_merchant_account_tag(tag):
    number = _tag_number(tag)
    return number is not None and 2 <= number <= 51


def is_merchant_information_tag(tag):
    number = _tag_number(tag)
    return number is not None and 64 <= number <= 98


def map_scheme(aid):
    return SCHEME_BY_AID.get(aid, PaymentScheme.UNKNOWN)


def map_aid_type(aid):
    return AID_TYPE_BY_AID.get(aid, AIDType.UNKNOWN)


def map_poi_method_type(poi_method):
    return POI_METHOD_TYPES.get(poi_method, POIMethodType.UNKNOWN)


@dataclass
class MerchantAccount:
    """One merchant account template (tags 02-51), split into its sub-fields."""

    aid: str = ""
    aid_type: AIDType = AIDType.UNKNOWN
    payment_scheme: PaymentScheme = PaymentScheme.UNKNOWN
    merchant_id: str = ""
    reference_1: str = ""
    reference_2: str = ""
    reference_3: str = ""
    raw_value: str = ""
    unresolved_data: dict = field(default_factory=dict)

    def to_dict(self):
        return {
            "aid": self.aid,
            "aid_type": self.aid_type.value,
            "payment_scheme": self.payment_scheme.value,
            "merchant_id": self.merchant_id,
            "reference_1": self.reference_1,
            "reference_2": self.reference_2,
            "reference_3": self.reference_3,
            "raw_value": self.raw_value,
            "unresolved_data": dict(self.unresolved_data),
        }


def parse_nested(tag, value):
    """Tokenizes a template value, naming the enclosing tag in any error."""
    try:
        return tokenize(value, depth=2)
    except EMVError as err:
        raise err.qualify(tag) from err


def parse_sub_fields(tag, value):
    return {t.tag: t.value for t in parse_nested(tag, value)}


def parse_merchant_account(tag, value):
    account = MerchantAccount(raw_value=value)
    for sub in parse_nested(tag, value):
        if sub.tag == "00":
            # The AID decides both the network and, for PromptPay, the payment type.
            account.aid = sub.value
            account.aid_type = map_aid_type(sub.value)
            account.payment_scheme = map_scheme(sub.value)
        elif sub.tag in ACCOUNT_FIELDS:
            setattr(account, ACCOUNT_FIELDS[sub.tag], sub.value)
        else:
            account.unresolved_data[sub.tag] = sub.value
    return account


def classify_field(payload, tag, value):
    """Stores one top-level triplet on the decoded payload."""
    if tag in SCALAR_FIELDS:
        setattr(payload, SCALAR_FIELDS[tag], value)
    elif tag == "01":
        payload.point_of_initiation_method = value
        payload.poi_method_type = map_poi_method_type(value)
    elif tag == "62":
        payload.additional_data = parse_sub_fields(tag, value)
    elif is_merchant_account_tag(tag):
        payload.merchant_account_info[tag] = parse_merchant_account(tag, value)
    elif is_merchant_information_tag(tag):
        payload.merchant_information[tag] = value
    else:
        payload.unresolved_data[tag] = value


def _subtag_table(parent_tag):
    if is_merchant_account_tag(parent_tag):
        return SUBTAG_INFO["account"]
    return SUBTAG_INFO.get(parent_tag, {})


def describe_tag(tag, parent_tag=None):
    """Returns a human readable name for a tag or a template sub-tag."""
    if parent_tag is not None:
        return _subtag_table(parent_tag).get(tag, {}).get("desc", "Unknown Subtag")

    if tag in TAG_INFO:
        return TAG_INFO[tag]["desc"]
    if is_merchant_account_tag(tag):
        return "Merchant Account Information"
    number = _tag_number(tag)
    if number is not None and 65 <= number <= 79:
        return "RFU for EMVCo"
    if number is not None and 80 <= number <= 99:
        return "Unreserved Template"
    return "Unknown Tag"


def check_field(tag, value, parent_tag=None):
    """Validates the value against EMV length and format conventions.

    Advisory only; the decoder never rejects a payload on these rules.
    """
    if parent_tag is not None:
        info = _subtag_table(parent_tag).get(tag)
    else:
        info = TAG_INFO.get(tag)

    if not info:
        return True, "N/A"

    # Check length constraints
    if "min_len" in info and len(value) < info["min_len"]:
        return False, f"ERR: Too short (min {info['min_len']})"
    if "max_len" in info and len(value) > info["max_len"]:
        return False, f"ERR: Too long (max {info['max_len']})"

    # Check pattern
    if "pattern" in info and not re.match(info["pattern"], value):
        return False, "ERR: Format mismatch"

    return True, "OK"
