"""Data model describing CRDs and the Go structures generated from them."""

from __future__ import annotations

from dataclasses import dataclass, field

METAV1_IMPORT = 'metav1 "k8s.io/apimachinery/pkg/apis/meta/v1"'
APIEXTENSIONS_IMPORT = 'apiextensionsv1 "k8s.io/apiextensions-apiserver/pkg/apis/apiextensions/v1"'


@dataclass
class EnumDef:
    """A single enum constant: its Go name and its raw JSON value."""

    name: str
    value: str


@dataclass
class FieldDef:
    """A field in a generated Go struct."""

    name: str
    type: str = ""
    json_tag: str = ""
    description: str = ""
    enums: list[EnumDef] = field(default_factory=list)
    enum_name: str = ""
    enum_type: str = ""


@dataclass
class StructDef:
    """A generated Go struct definition."""

    name: str
    fields: list[FieldDef] = field(default_factory=list)
    description: str = ""
    root: bool = False


@dataclass
class CRDNames:
    """Kind and list kind of a CRD."""

    kind: str
    list: str


@dataclass
class CustomResource:
    """One parsed CRD with its root struct and nested structs."""

    kind: str
    plural: str = ""
    list: str = ""
    group: str = ""
    version: str = ""
    root: StructDef | None = None
    structs: dict[str, StructDef] = field(default_factory=dict)
    imports: set[str] = field(default_factory=lambda: {METAV1_IMPORT})


@dataclass
class CustomResources:
    """All CRDs parsed for one API group and version."""

    items: list[CustomResource] = field(default_factory=list)
    names: list[CRDNames] = field(default_factory=list)
    group: str = ""
    version: str = ""