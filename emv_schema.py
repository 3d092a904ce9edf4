# Purpose: Validate serialized decoder output against the published JSON Schemas.

import os

import referencing
import yaml
from jsonschema import Draft7Validator
from referencing.jsonschema import DRAFT7

# --- CONFIGURATION ---
SCHEMA_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "schema", "emv_qr.yaml")
SCHEMA_URI = "http://emv-qr/emv_qr.yaml"


def load_schema_document(path=SCHEMA_PATH):
    with open(path, 'r') as f:
        return yaml.safe_load(f)


def validate_against_schema(data, schema_name, path=SCHEMA_PATH):
    """Validates a to_dict() result against components/schemas/<schema_name>.

    Raises jsonschema.ValidationError on the first mismatch.
    """
    document = load_schema_document(path)
    if schema_name not in document["components"]["schemas"]:
        raise KeyError(f"unknown schema: {schema_name}")

    # Resolve internal $refs through a registry keyed on a fixed base URI
    target_schema = {"$ref": f"{SCHEMA_URI}#/components/schemas/{schema_name}"}
    resource = referencing.Resource.from_contents(document, default_specification=DRAFT7)
    registry = referencing.Registry().with_resource(uri=SCHEMA_URI, resource=resource)

    Draft7Validator(target_schema, registry=registry).validate(data)
