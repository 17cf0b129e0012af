from __future__ import annotations
import json
from typing import Any, Dict, Mapping, Union

from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

from splay_bridge.descriptor import Descriptor
from splay_bridge.runtime.errors import FormatError

# Wire shape exchanged with the RPC layer. Extra fields are ignored.
DESCRIPTOR_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["type"],
    "properties": {
        "type": {"type": "string", "minLength": 1},
        "props": {"type": "object"},
        "children": {"type": "array", "items": {"$ref": "#"}},
        "key": {"type": ["string", "integer", "null"]},
    },
}

_VALIDATOR = Draft7Validator(DESCRIPTOR_SCHEMA)


def _stable_json(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def to_wire(descriptor: Descriptor) -> Dict[str, Any]:
    out: Dict[str, Any] = {"type": descriptor.type, "props": dict(descriptor.props)}
    if descriptor.children is not None:
        out["children"] = [to_wire(c) for c in descriptor.children]
    if descriptor.key is not None:
        out["key"] = descriptor.key
    return out


def _build(obj: Mapping[str, Any]) -> Descriptor:
    children = obj.get("children")
    return Descriptor(
        type=obj["type"],
        props=obj.get("props") or {},
        children=None if children is None else tuple(_build(c) for c in children),
        key=obj.get("key"),
    )


def from_wire(obj: Any) -> Descriptor:
    error = best_match(_VALIDATOR.iter_errors(obj))
    if error is not None:
        where = "/".join(str(p) for p in error.absolute_path) or "<root>"
        raise FormatError(f"Malformed descriptor at {where}: {error.message}")
    return _build(obj)


def serialize(descriptor: Descriptor) -> str:
    try:
        return _stable_json(to_wire(descriptor))
    except (TypeError, ValueError) as exc:
        raise FormatError(f"Descriptor {descriptor.type!r} is not JSON-serializable: {exc}") from exc


def parse(raw: Union[str, bytes, bytearray, Mapping[str, Any]]) -> Descriptor:
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise FormatError(f"Descriptor is not valid JSON: {exc}") from exc
    return from_wire(raw)
