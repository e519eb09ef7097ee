"""Parse CRD manifests and derive Go struct definitions from their schemas."""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Iterable, Mapping
from itertools import groupby
from pathlib import Path
from typing import Any

import yaml

from .models import (
    APIEXTENSIONS_IMPORT,
    CRDNames,
    CustomResource,
    CustomResources,
    EnumDef,
    FieldDef,
    StructDef,
)

log = logging.getLogger(__name__)


class ParseError(Exception):
    """Raised when a CRD cannot be read or interpreted."""


def _schema_of(value: Any) -> dict | None:
    """Return the schema form of an items/additionalProperties value, if any."""
    return value if isinstance(value, dict) else None


def to_camel_case(s: str) -> str:
    """Convert a string to CamelCase, dropping non-alphanumeric characters."""
    words = ("".join(chars) for is_word, chars in groupby(s, key=str.isalnum) if is_word)
    return "".join(word[0].upper() + word[1:] for word in words)


def _ref_type(ref: str) -> str:
    return to_camel_case(ref.split("/")[-1])


def map_type(prop: Mapping[str, Any]) -> str:
    """Map an OpenAPI schema property to a Go type name."""
    ptype = prop.get("type") or ""
    fmt = prop.get("format") or ""
    if not ptype:
        if "$ref" in prop and prop["$ref"] is not None:
            return _ref_type(prop["$ref"])
        return "any"
    if ptype == "string":
        if fmt == "date-time":
            return "metav1.Time"
        if fmt in ("byte", "binary"):
            return "[]byte"
        return "string"
    if ptype in ("integer", "number"):
        formats = {"int32": "int32", "int64": "int64", "float": "float32", "double": "float64"}
        if fmt in formats:
            return formats[fmt]
        return "int64" if ptype == "integer" else "float64"
    if ptype == "boolean":
        return "bool"
    if ptype == "array":
        items = _schema_of(prop.get("items"))
        if items is not None:
            return "[]" + map_type(items)
        return "[]any"
    if ptype == "object":
        return "map[string]any"
    return "any"


def _raw_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def generate_enum(prop: Mapping[str, Any], field_name: str) -> list[EnumDef]:
    """Build enum constants for the enum values of a property."""
    enums = []
    for value in prop.get("enum") or []:
        raw = _raw_json(value)
        enums.append(EnumDef(name=field_name + to_camel_case(raw.replace('"', "")), value=raw))
    return enums


def get_hash(value: Any) -> str:
    """Return an MD5 hex digest of the canonical JSON form of a value."""
    data = json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.md5(data.encode("utf-8")).hexdigest()


def extract_schema(crd: Mapping[str, Any], desired_version: str) -> tuple[dict, str]:
    """Return the OpenAPI v3 schema and name of the storage version of a CRD."""
    spec = crd.get("spec") or {}
    for version in spec.get("versions") or []:
        name = version.get("name", "")
        if version.get("storage") and (not desired_version or desired_version == name):
            schema = (version.get("schema") or {}).get("openAPIV3Schema")
            if not isinstance(schema, dict):
                raise ParseError(f'version "{name}" in CRD has no openAPIV3Schema')
            return schema, name
    raise ParseError(f'could not find desired version "{desired_version}" in CRD')


class SchemaParser:
    """Turns CRD schemas into struct definitions, keeping names unique across CRDs."""

    def __init__(self) -> None:
        self.struct_hashes: dict[str, str] = {}
        self.struct_names: set[str] = set()

    def parse_crd(self, data: str | bytes, desired_version: str) -> CustomResource:
        """Parse one CRD document and generate its structs."""
        try:
            crd = yaml.safe_load(data)
        except yaml.YAMLError as exc:
            raise ParseError(f"invalid CRD yaml: {exc}") from exc
        if not isinstance(crd, dict):
            raise ParseError("CRD document is not a mapping")

        schema, version = extract_schema(crd, desired_version)
        spec = crd.get("spec") or {}
        names = spec.get("names") or {}
        cr = CustomResource(
            kind=names.get("kind", ""),
            plural=names.get("plural", ""),
            list=names.get("listKind", ""),
            group=spec.get("group", ""),
            version=version,
        )
        self.generate_structs(schema, cr, cr.kind, cr.kind, True)
        return cr

    def generate_structs(
        self, schema: Mapping[str, Any], cr: CustomResource, name: str, path: str, root: bool
    ) -> None:
        """Create a struct for a schema, recursing into nested objects."""
        struct_def = StructDef(name=name, description=f"{name} represents a {path}", root=root)
        if root:
            cr.root = struct_def
        else:
            cr.structs[name] = struct_def

        properties = schema.get("properties") or {}
        for prop_name in sorted(properties):
            prop = properties[prop_name] or {}
            field_name = to_camel_case(prop_name)
            ptype = prop.get("type") or ""

            if ptype:
                field_type = map_type(prop)
                if ptype == "object":
                    if prop.get("properties"):
                        field_type = self.generate_struct_property(
                            cr, prop, field_name, path, prop_name, root
                        )
                    else:
                        additional = _schema_of(prop.get("additionalProperties"))
                        if additional is not None:
                            field_type = "map[string]" + map_type(additional)
                        else:
                            field_type = "map[string]any"
                elif ptype == "array":
                    items = _schema_of(prop.get("items"))
                    if items is not None and items.get("type") == "object":
                        field_type = "[]" + self.generate_struct_property(
                            cr, items, field_name, path, prop_name, root
                        )
            elif prop.get("$ref") is not None:
                field_type = _ref_type(prop["$ref"])
            else:
                field_type = "*apiextensionsv1.JSON"
                cr.imports.add(APIEXTENSIONS_IMPORT)

            field = FieldDef(
                name=field_name, json_tag=prop_name, description=prop.get("description", "")
            )

            items = _schema_of(prop.get("items"))
            if items is not None and items.get("enum"):
                field_type = "[]" + self.generate_enum_struct(cr, items, field_name, field, path)
            elif prop.get("enum"):
                field_type = self.generate_enum_struct(cr, prop, field_name, field, path)

            field.type = field_type
            struct_def.fields.append(field)

    def generate_enum_struct(
        self,
        cr: CustomResource,
        prop: Mapping[str, Any],
        field_name: str,
        field: FieldDef,
        path: str,
    ) -> str:
        """Return the enum type for a property, defining it on the field when new."""
        digest = get_hash(prop.get("enum") or [])
        if digest in self.struct_hashes:
            return self.struct_hashes[digest]
        uniq = self.new_uniq_field_name(cr, field_name, False, path)
        field.enums = generate_enum(prop, uniq)
        field.enum_type = prop.get("type") or ""
        field.enum_name = uniq
        self.struct_hashes[digest] = uniq
        return uniq

    def new_uniq_field_name(
        self, cr: CustomResource, field_name: str, root: bool, path: str
    ) -> str:
        """Pick a struct name not used yet, prefixing with kind or path segments."""
        if not root and field_name not in self.struct_names:
            self.struct_names.add(field_name)
            return field_name

        name = cr.kind + field_name
        if name not in self.struct_names:
            self.struct_names.add(name)
            return name

        prefix = ""
        for segment in reversed(path.split(".")):
            prefix = to_camel_case(segment) + prefix
            name = prefix + field_name
            if name not in self.struct_names:
                self.struct_names.add(name)
                return name

        digest = hashlib.md5(f"{path}.{field_name}".encode("utf-8")).hexdigest()
        return f"{field_name}_{digest}"

    def generate_struct_property(
        self,
        cr: CustomResource,
        prop: Mapping[str, Any],
        field_name: str,
        path: str,
        prop_name: str,
        root: bool,
    ) -> str:
        """Return the struct type for an object property, generating it when new."""
        digest = get_hash(prop.get("properties") or {})
        if digest in self.struct_hashes:
            return self.struct_hashes[digest]
        uniq = self.new_uniq_field_name(cr, field_name, root, path)
        self.struct_hashes[digest] = uniq
        self.generate_structs(prop, cr, uniq, f"{path}.{prop_name}", False)
        return uniq


def parse(crds: Iterable[str | Path], version: str = "") -> CustomResources:
    """Parse CRD files that must share one group and version."""
    resources = CustomResources(version=version)
    parser = SchemaParser()
    previous_kind = ""

    for index, crd_path in enumerate(crds):
        try:
            data = Path(crd_path).read_bytes()
        except OSError as exc:
            raise ParseError(f"error reading file {crd_path}: {exc}") from exc

        cr = parser.parse_crd(data, resources.version)
        resources.names.append(CRDNames(kind=cr.kind, list=cr.list))

        if index > 0 and resources.group != cr.group:
            raise ParseError(
                f"not all CRDs have the same group: {resources.group} ({previous_kind}) "
                f"and {cr.group} ({cr.kind})"
            )
        if version and version != cr.version:
            raise ParseError(
                f"not all CRDs have the same version: {version} ({previous_kind}) "
                f"and {cr.version} ({cr.kind})"
            )

        resources.version = cr.version
        resources.group = cr.group
        previous_kind = cr.kind
        resources.items.append(cr)
        log.debug("parsed CRD %s from %s", cr.kind, crd_path)

    return resources