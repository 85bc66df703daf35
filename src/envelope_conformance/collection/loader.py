"""Loading response samples from collection files.

Two layouts are understood:

- Native collections (YAML or JSON): a mapping with a `samples` list, or a
  bare list, where each entry carries `name`, `method`, `path`, `status`
  (or `code`), `body` and an optional `dataSchema`.
- Postman v2.1 collections: every saved response example of every request,
  folders included, becomes one sample.
"""

import json
from pathlib import Path
from typing import Any, Iterator, Optional, Union
from urllib.parse import urlsplit

import yaml
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for
from pydantic import ValidationError

from envelope_conformance.errors import CollectionError
from envelope_conformance.models.enums import RuleId, Severity
from envelope_conformance.models.finding import Finding
from envelope_conformance.models.sample import ResponseSample
from envelope_conformance.observability.logging import get_logger

logger = get_logger(__name__)

_SCHEMA_KEYS = ("dataSchema", "data_schema")


def load_collection(file_path: Union[str, Path]) -> list[ResponseSample]:
    """Reads a collection file into response samples.

    Args:
        file_path: Path to a native YAML/JSON collection or a Postman
            v2.1 export.

    Returns:
        The samples, in file order.

    Raises:
        CollectionError: If the file is missing, unparsable or malformed.
    """
    path = Path(file_path)
    if not path.exists():
        raise CollectionError(f"Collection file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                document = json.load(f)
            else:
                document = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise CollectionError(f"Error parsing collection {path}: {e}") from e
    except (UnicodeDecodeError, OSError) as e:
        raise CollectionError(f"Error reading collection {path}: {e}") from e

    samples = parse_collection(document)
    logger.info(
        f"Loaded {len(samples)} samples from {path}",
        extra={"extra_fields": {"event": "collection_loaded", "samples": len(samples)}},
    )
    return samples


def parse_collection(document: Any) -> list[ResponseSample]:
    """Turns an already-decoded collection document into samples."""
    if is_postman_collection(document):
        return list(_iter_postman_samples(document.get("item", []), prefix=""))

    if isinstance(document, dict):
        entries = document.get("samples")
        if not isinstance(entries, list):
            raise CollectionError("Collection must contain a 'samples' list")
    elif isinstance(document, list):
        entries = document
    else:
        raise CollectionError("Collection must be a mapping or a list of samples")

    return [_native_sample(entry, index) for index, entry in enumerate(entries)]


def is_postman_collection(document: Any) -> bool:
    if not isinstance(document, dict) or "item" not in document:
        return False
    info = document.get("info")
    return isinstance(info, dict) and "postman" in str(info.get("schema", "")).lower()


def _native_sample(entry: Any, index: int) -> ResponseSample:
    if not isinstance(entry, dict):
        raise CollectionError(f"Sample #{index} must be a mapping")

    fields = dict(entry)
    if "status" not in fields and "code" in fields:
        fields["status"] = fields.pop("code")
    for key in _SCHEMA_KEYS:
        if key in fields:
            fields["data_schema"] = _checked_schema(fields.pop(key), index)
    fields.setdefault("name", f"sample-{index}")

    try:
        return ResponseSample(**fields)
    except ValidationError as e:
        raise CollectionError(f"Sample #{index} ({fields['name']}) is invalid: {e}") from e


def _checked_schema(schema: Any, index: int) -> Optional[dict[str, Any]]:
    if schema is None:
        return None
    if not isinstance(schema, dict):
        raise CollectionError(f"Sample #{index}: dataSchema must be a mapping")
    try:
        validator_for(schema).check_schema(schema)
    except SchemaError as e:
        raise CollectionError(f"Sample #{index}: invalid dataSchema: {e.message}") from e
    return schema


def _iter_postman_samples(items: Any, prefix: str) -> Iterator[ResponseSample]:
    if not isinstance(items, list):
        raise CollectionError("Postman 'item' must be a list")

    for item in items:
        if not isinstance(item, dict):
            raise CollectionError("Postman items must be mappings")
        name = f"{prefix}{item.get('name', 'unnamed')}"

        if "item" in item:
            yield from _iter_postman_samples(item["item"], prefix=f"{name} / ")
            continue

        request = item.get("request") or {}
        responses = item.get("response") or []
        if not isinstance(responses, list):
            raise CollectionError(f"Postman request {name!r}: 'response' must be a list")
        for response in responses:
            if not isinstance(response, dict):
                raise CollectionError(
                    f"Postman request {name!r}: response examples must be mappings"
                )
            yield _postman_sample(name, request, response)


def _postman_sample(name: str, request: Any, response: dict[str, Any]) -> ResponseSample:
    original = response.get("originalRequest") or request
    method = original.get("method", "GET") if isinstance(original, dict) else "GET"
    url = original.get("url") if isinstance(original, dict) else original

    label = f"{name} / {response['name']}" if response.get("name") else name
    status = response.get("code")
    if not isinstance(status, int):
        raise CollectionError(f"Postman example {label!r} has no integer 'code'")

    body, load_findings = decode_body(response.get("body"))
    try:
        return ResponseSample(
            name=label,
            method=method,
            path=postman_path(url),
            status=status,
            body=body,
            load_findings=tuple(load_findings),
        )
    except ValidationError as e:
        raise CollectionError(f"Postman example {label!r} is invalid: {e}") from e


def postman_path(url: Any) -> str:
    """Extracts the request path from a Postman URL (string or object)."""
    if isinstance(url, dict):
        segments = url.get("path")
        if isinstance(segments, list):
            return "/" + "/".join(str(s) for s in segments)
        url = url.get("raw", "")
    if not isinstance(url, str) or not url:
        return ""

    if "://" in url:
        return urlsplit(url).path
    route = url.split("?", 1)[0]
    if route.startswith("{{"):
        # {{baseUrl}}/v1/users -> /v1/users
        _, _, route = route.partition("}}")
    return route if route.startswith("/") else f"/{route}"


def decode_body(raw: Any) -> tuple[Any, list[Finding]]:
    """Decodes a raw response body.

    Args:
        raw: Body text, or an already-decoded value.

    Returns:
        The decoded body (None for an empty body) and any invalid-json
        finding raised while decoding.
    """
    if raw is None or not isinstance(raw, (str, bytes)):
        return raw, []
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if not raw.strip():
        return None, []
    try:
        return json.loads(raw), []
    except json.JSONDecodeError as e:
        return None, [
            Finding(
                path="",
                rule=RuleId.INVALID_JSON,
                severity=Severity.ERROR,
                message=f"Body is not valid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
            )
        ]
