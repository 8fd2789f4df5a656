"""
Body encoders/decoders for JSON, XML and CSV.
"""
import csv
import dataclasses
import io
import json
import typing
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Mapping, Optional, Type

from ..errors import DecodeError


def encode_json(value: Any) -> bytes:
    """Serialize a value to compact UTF-8 JSON."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    elif hasattr(value, "model_dump"):
        value = value.model_dump()
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def decode_json(body: bytes) -> Any:
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise DecodeError(f"invalid JSON body: {exc}") from exc


def _fill_element(parent: ET.Element, value: Any) -> None:
    if isinstance(value, Mapping):
        for key, child_value in value.items():
            if isinstance(child_value, (list, tuple)):
                for item in child_value:
                    _fill_element(ET.SubElement(parent, str(key)), item)
            else:
                _fill_element(ET.SubElement(parent, str(key)), child_value)
    elif value is not None:
        parent.text = str(value)


def encode_xml(value: Any, root: str = "root") -> bytes:
    """
    Serialize a value to XML.

    Elements are written as is, str/bytes are taken to be XML already, and
    mappings (or dataclasses) become nested elements under ``root``.
    """
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, ET.Element):
        return ET.tostring(value, encoding="utf-8")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    if not isinstance(value, Mapping):
        raise TypeError(f"cannot encode {type(value).__name__} as XML")
    element = ET.Element(root)
    _fill_element(element, value)
    return ET.tostring(element, encoding="utf-8")


def decode_xml(body: bytes) -> ET.Element:
    try:
        return ET.fromstring(body)
    except ET.ParseError as exc:
        raise DecodeError(f"invalid XML body: {exc}") from exc


def element_to_dict(element: ET.Element) -> Dict[str, Optional[str]]:
    """Map each child tag of ``element`` to its text."""
    return {child.tag: child.text for child in element}


def to_model(data: Any, model: Optional[Type] = None) -> Any:
    """
    Convert decoded data into ``model``.

    Supports dataclasses and classes exposing ``model_validate`` (pydantic);
    lists are converted item by item. Without a model the data is returned.
    """
    if model is None:
        return data
    if isinstance(data, list):
        return [to_model(item, model) for item in data]
    if hasattr(model, "model_validate"):
        return model.model_validate(data)
    if dataclasses.is_dataclass(model):
        if not isinstance(data, Mapping):
            raise DecodeError(f"cannot build {model.__name__} from {type(data).__name__}")
        names = {f.name for f in dataclasses.fields(model) if f.init}
        try:
            return model(**{k: v for k, v in data.items() if k in names})
        except TypeError as exc:
            raise DecodeError(f"cannot build {model.__name__}: {exc}") from exc
    raise TypeError(f"unsupported model type: {model!r}")


def _is_str_field(field: dataclasses.Field, hints: Mapping[str, Any]) -> bool:
    return hints.get(field.name, field.type) in (str, "str")


def _csv_schema(model: Type) -> Dict[str, str]:
    """field name -> column name, for the str fields of a dataclass."""
    hints = typing.get_type_hints(model)
    return {
        f.name: f.metadata.get("csv", f.name)
        for f in dataclasses.fields(model)
        if f.init and _is_str_field(f, hints)
    }


def _build_csv_row(model: Type, values: Dict[str, str]) -> Any:
    kwargs: Dict[str, Any] = {}
    for f in dataclasses.fields(model):
        if not f.init:
            continue
        if f.name in values:
            kwargs[f.name] = values[f.name]
        elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            # fields CSV does not populate fall back to a zero value
            kwargs[f.name] = "" if f.name in _csv_schema(model) else None
    return model(**kwargs)


def decode_csv(
    body: bytes,
    model: Optional[Type] = None,
    *,
    schema: Optional[Mapping[str, str]] = None,
    separator: str = ",",
) -> List[Any]:
    """
    Decode a CSV body whose first row holds the column names.

    - no model, no schema: list of dicts keyed by column name
    - schema (field -> column): list of dicts keyed by field name
    - dataclass model: list of instances; column names come from
      ``field(metadata={"csv": "col"})`` or the field name, and only ``str``
      fields are populated, others keep their defaults
    """
    try:
        rows = list(csv.reader(io.StringIO(body.decode("utf-8")), delimiter=separator))
    except (csv.Error, UnicodeDecodeError) as exc:
        raise DecodeError(f"invalid CSV body: {exc}") from exc
    if not rows:
        return []

    header_index = {name: i for i, name in enumerate(rows[0])}
    if model is not None and schema is None:
        if not dataclasses.is_dataclass(model):
            raise TypeError("CSV model must be a dataclass")
        schema = _csv_schema(model)

    results = []
    for record in rows[1:]:
        if schema is None:
            results.append({name: record[i] for name, i in header_index.items() if i < len(record)})
            continue
        values = {}
        for field_name, column in schema.items():
            i = header_index.get(column)
            if i is not None and i < len(record):
                values[field_name] = record[i]
        results.append(_build_csv_row(model, values) if model is not None else values)
    return results
