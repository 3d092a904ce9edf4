# Purpose: Reduce a decoded EMV payload to one primary merchant account.

from dataclasses import dataclass

from emv_fields import AIDType, PaymentScheme, POIMethodType, is_merchant_account_tag

# --- CONFIGURATION ---
# Checked in this order before falling back to any other merchant account tag.
PREFERRED_ACCOUNT_TAGS = ("26", "27", "28", "29", "30", "31", "32", "33", "34", "35")


@dataclass(frozen=True)
class ConsolidatedView:
    aid: str = ""
    aid_type: AIDType = AIDType.UNKNOWN
    poi_method_type: POIMethodType = POIMethodType.UNKNOWN
    payment_scheme: PaymentScheme = PaymentScheme.UNKNOWN
    transaction_amount: str = ""
    country_code: str = ""
    merchant_id: str = ""
    reference_1: str = ""
    reference_2: str = ""
    reference_3: str = ""

    def to_dict(self):
        return {
            "aid": self.aid,
            "aid_type": self.aid_type.value,
            "poi_method_type": self.poi_method_type.value,
            "payment_scheme": self.payment_scheme.value,
            "transaction_amount": self.transaction_amount,
            "country_code": self.country_code,
            "merchant_id": self.merchant_id,
            "reference_1": self.reference_1,
            "reference_2": self.reference_2,
            "reference_3": self.reference_3,
        }


def primary_account(payload):
    """Returns the merchant account that best represents the payee, or None."""
    accounts = payload.merchant_account_info
    for tag in PREFERRED_ACCOUNT_TAGS:
        if tag in accounts:
            return accounts[tag]
    # Falls back to encounter order so the choice is reproducible.
    for tag, account in accounts.items():
        if is_merchant_account_tag(tag):
            return account
    return None


def fill_missing_references(references, additional_data):
    """Fills empty reference slots with additional data values, in payload order."""
    values = iter(additional_data.values())
    filled = []
    for ref in references:
        if not ref:
            ref = next(values, "")
        filled.append(ref)
    return filled


def project(payload):
    """Builds the consolidated view of a DecodedPayload."""
    account = primary_account(payload)
    if account is None:
        return ConsolidatedView(
            poi_method_type=payload.poi_method_type,
            transaction_amount=payload.transaction_amount,
            country_code=payload.country_code,
        )

    ref1, ref2, ref3 = fill_missing_references(
        [account.reference_1, account.reference_2, account.reference_3],
        payload.additional_data,
    )
    return ConsolidatedView(
        aid=account.aid,
        aid_type=account.aid_type,
        poi_method_type=payload.poi_method_type,
        payment_scheme=account.payment_scheme,
        transaction_amount=payload.transaction_amount,
        country_code=payload.country_code,
        merchant_id=account.merchant_id,
        reference_1=ref1,
        reference_2=ref2,
        reference_3=ref3,
    )
