# Purpose: Inspect EMV QR payloads from the command line.
# Prints the CRC status and a field table, or the decoded records as JSON.

import argparse
import json
import logging
import os
import sys

from jsonschema import ValidationError

from emv_decoder import decode, describe_flat, parse_compact, parse_flat
from emv_errors import EMVError
from emv_schema import validate_against_schema
from emv_summary import project

# --- CONFIGURATION ---
QR_TEXT_FILE = "qrcode.txt"


def load_qr_content(qr_input):
    """Accepts a QR string or a path to a file holding one."""
    if os.path.isfile(qr_input):
        with open(qr_input, "r") as f:
            qr_content = f.read().strip()
        return qr_content
    return qr_input.strip()


def print_crc_status(payload):
    # decode() has already rejected a mismatching CRC
    if payload.crc:
        print(f"[OK] CRC-16/CCITT-FALSE Valid: {payload.crc}")
    else:
        print("[*] No CRC field (tag 63) present; integrity not checked")


def print_field_table(qr_content):
    print(f"\n{'TAG':3}.  | {'LEN':3} | {'VALID':12} | {'DESCRIPTION':40} | {'VALUE'}")
    print("-" * 110)

    for field in describe_flat(qr_content):
        status = "[OK]" if field['is_valid'] else f"[{field['validation_msg']}]"
        print(f"{field['tag']:3}   | {field['length']:02}  | {status:12} | {field['description']:40} | {field['value']}")

        # Nested rows for merchant account templates and additional data
        for sub in field.get("subfields", []):
            sub_status = "[OK]" if sub['is_valid'] else f"[{sub['validation_msg']}]"
            print(f"{field['tag']}.{sub['tag']:2} | {sub['length']:02}  | {sub_status:12} | {sub['description']:40} | {sub['value']}")


def print_decoded(payload):
    print("\n" + "=" * 60)
    print("DECODED FIELDS")
    print("=" * 60)
    data = payload.to_dict()
    skip_keys = ["merchant_account_info", "additional_data", "merchant_information", "unresolved_data"]
    for k, v in data.items():
        if k not in skip_keys and v:
            print(f"{k:30}: {v}")

    for tag, account in data["merchant_account_info"].items():
        print(f"\nMerchant Account (tag {tag})")
        print("-" * 60)
        for k, v in account.items():
            if k != "raw_value" and v:
                print(f"{k:30}: {v}")

    for section in ("additional_data", "merchant_information", "unresolved_data"):
        if data[section]:
            print(f"\n{section}")
            print("-" * 60)
            for tag, value in data[section].items():
                print(f"{tag:30}: {value}")


def print_json(record, schema_name):
    data = [t.to_dict() for t in record] if isinstance(record, list) else record.to_dict()
    print(json.dumps(data, indent=4))
    try:
        validate_against_schema(data, schema_name)
        print(f"[OK] JSON validated against {schema_name}", file=sys.stderr)
    except ValidationError as e:
        print(f"[!] Schema Validation Error ({schema_name}): {e.message}", file=sys.stderr)


def run(qr_content, mode, as_json):
    if mode == "flat":
        triplets = parse_flat(qr_content)
        if as_json:
            print_json(triplets, "TripletList")
        else:
            print_field_table(qr_content)
        return

    if mode == "compact":
        info = parse_compact(qr_content)
        if as_json:
            print_json(info, "CompactInfo")
        else:
            for k, v in info.to_dict().items():
                print(f"{k:30}: {v}")
        return

    payload = decode(qr_content)
    if mode == "summary":
        view = project(payload)
        if as_json:
            print_json(view, "ConsolidatedView")
        else:
            for k, v in view.to_dict().items():
                print(f"{k:30}: {v}")
        return

    if as_json:
        print_json(payload, "DecodedPayload")
        return

    print_crc_status(payload)
    print_field_table(qr_content)
    print_decoded(payload)
    print("=" * 110)


def main(argv=None):
    parser = argparse.ArgumentParser(description="EMV QR Payload Inspector")
    parser.add_argument("qr", nargs="?", default=QR_TEXT_FILE, help="QR content string or path to a file containing it")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--flat", dest="mode", action="store_const", const="flat", help="List raw TLV fields without decoding")
    group.add_argument("--compact", dest="mode", action="store_const", const="compact", help="Parse with the compact (trailing CRC) grammar")
    group.add_argument("--summary", dest="mode", action="store_const", const="summary", help="Show the primary merchant account only")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.qr == QR_TEXT_FILE and not os.path.exists(QR_TEXT_FILE):
        print(f"[!] Error: {QR_TEXT_FILE} not found. Pass a QR string or file path.")
        return 1

    qr_content = load_qr_content(args.qr)
    if not args.json:
        if qr_content != args.qr.strip():
            print(f"[*] Loaded QR content from file: {args.qr}")
        print("=" * 110)
        print("EMV QR PARSER")
        print("=" * 110)
        print(f"Raw Content: {qr_content}\n")

    try:
        run(qr_content, args.mode or "decode", args.json)
    except EMVError as e:
        print(f"[!] Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
