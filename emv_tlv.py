# Purpose: Tokenize and encode the EMV QR Tag-Length-Value grammar.
# Tags and lengths are two characters each; the value is `length` characters long.

import re
from dataclasses import dataclass

from emv_errors import MalformedLength, TruncatedValue, UnsupportedGrammar

# --- CONFIGURATION ---
# Top level plus one level of templates (merchant account, additional data).
MAX_NESTING_DEPTH = 2

LENGTH_PATTERN = re.compile(r"[0-9]{2}")


@dataclass
class Triplet:
    tag: str
    length: int
    value: str

    def to_dict(self):
        return {"tag": self.tag, "length": self.length, "value": self.value}


def tokenize(data, depth=1):
    """Splits a TLV string into triplets, in the order they appear.

    A trailing fragment shorter than a tag+length header is ignored.
    """
    if depth > MAX_NESTING_DEPTH:
        raise UnsupportedGrammar(f"TLV nesting deeper than {MAX_NESTING_DEPTH} levels")

    triplets = []
    i = 0
    while i + 4 <= len(data):
        tag = data[i:i+2]
        length_str = data[i+2:i+4]
        if not LENGTH_PATTERN.fullmatch(length_str):
            raise MalformedLength(f"invalid length at position {i+2}: {length_str}", tag=tag)
        length = int(length_str)

        if i + 4 + length > len(data):
            raise TruncatedValue(f"invalid data length at tag {tag}", tag=tag)

        triplets.append(Triplet(tag, length, data[i+4:i+4+length]))
        i += 4 + length
    return triplets


def encode_tlv(tag, value):
    """Encodes one field as tag + two-digit length + value."""
    if len(tag) != 2:
        raise ValueError(f"tag must be two characters: {tag!r}")
    if len(value) > 99:
        raise ValueError(f"value for tag {tag} is longer than 99 characters")
    return f"{tag}{len(value):02}{value}"


def serialize(triplets):
    return "".join(encode_tlv(t.tag, t.value) for t in triplets)
