"""Prepare generated struct definitions for output and write the result files."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .models import CustomResource, FieldDef, StructDef

log = logging.getLogger(__name__)

APP_NAME = "opanapi-generator"
ROOT_FIELD_TAGS = ("spec", "status")


@dataclass
class OutFile:
    """A file to write, with the message logged once it has been written."""

    name: Path
    content: str
    success_msg: str = ""
    success_args: Mapping[str, Any] = field(default_factory=dict)


def write_files(files: Iterable[OutFile]) -> None:
    """Write each file, creating its parent directories as needed."""
    for out in files:
        path = Path(out.name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OSError(f"error creating directory: {exc}") from exc
        try:
            path.write_text(out.content, encoding="utf-8")
        except OSError as exc:
            raise OSError(f"error writing output file: {exc}") from exc
        if out.success_msg:
            details = " ".join(f"{key}={value}" for key, value in out.success_args.items())
            log.info("%s %s", out.success_msg, details)


def prepare_description(desc: str, field: bool) -> str:
    """Turn a multi-line description into a Go comment continuation."""
    indent = "\t// " if field else "// "
    return desc.replace("\n", "\n" + indent)


def prepare(struct_def: StructDef) -> None:
    """Format descriptions as comments and sort the struct's fields by name."""
    struct_def.description = prepare_description(struct_def.description, False)
    struct_def.fields.sort(key=lambda f: f.name)
    for f in struct_def.fields:
        f.description = prepare_description(f.description, True)


def filter_root_fields(cr: CustomResource) -> list[FieldDef]:
    """Keep only the spec and status fields of the root struct and return them."""
    if cr.root is None:
        return []
    cr.root.fields = [f for f in cr.root.fields if f.json_tag in ROOT_FIELD_TAGS]
    return cr.root.fields