# crdgen

Tools for deriving Go struct definitions from the OpenAPI v3 schemas of
Kubernetes CustomResourceDefinitions (CRDs), and for copying existing API source
files out of a Go module.

## Installation

```
pip install crdgen
```

## Parsing CRDs

`crdgen.parser.parse(crds, version="")` reads one or more CRD YAML files and
builds the struct definitions that describe their schemas:

```python
from crdgen.parser import parse

resources = parse(["certificates.cert-manager.io.yaml"])
print(resources.group, resources.version)
for cr in resources.items:
    print(cr.kind, cr.root.name, sorted(cr.structs))
```

- With an empty version the storage version of each CRD is used; otherwise the
  named version must exist and be the storage version. The version found in the
  first CRD is then required of the ones that follow.
- All CRDs passed together must share the same group, and the same version
  when one is given.
- Properties become fields in name order. Nested objects, and arrays of
  objects, become structs of their own; objects without properties become
  `map[string]...` types; properties with neither a type nor a `$ref` become
  `*apiextensionsv1.JSON`.
- Properties with `enum` values get an enum type with one constant per value.
- Structs and enums of identical shape are shared across all the CRDs parsed
  together. Name clashes are resolved by prefixing the kind, then parts of the
  schema path, and finally by appending an MD5 digest.
- Unreadable files, invalid YAML, a missing version or mismatched groups and
  versions raise `crdgen.parser.ParseError`.

`crdgen.parser.SchemaParser` does the per-CRD work (`parse_crd`,
`generate_structs`, `new_uniq_field_name` and friends) and keeps the names and
shapes already used; a single instance can be reused for several documents.

The result is made of the dataclasses in `crdgen.models`: `CustomResources`,
`CustomResource`, `StructDef`, `FieldDef`, `EnumDef` and `CRDNames`.

Helpers available from `crdgen.parser`:

- `to_camel_case(s)` – CamelCase, dropping non-alphanumeric characters
- `map_type(prop)` – OpenAPI type and format to a Go type name
- `extract_schema(crd, desired_version)` – schema and name of the storage version
- `generate_enum(prop, field_name)` – enum constants for a property
- `get_hash(value)` – MD5 hex digest of a value's canonical JSON form

## Preparing output

`crdgen.render` holds helpers for turning struct definitions into output:

- `prepare(struct_def)` sorts fields by name and turns multi-line descriptions
  into Go comment continuations (`prepare_description(desc, field)` does the
  latter for one string).
- `filter_root_fields(cr)` keeps only the `spec` and `status` fields of a
  resource's root struct.
- `write_files(files)` writes a list of `OutFile` entries, creating parent
  directories as needed and logging each entry's success message.

## Extracting API files from a Go module

The `extract-crd-api` command fetches a Go module and copies the files of one of
its directories into a target directory:

```
extract-crd-api --module github.com/example/provider@v1.2.3 \
  --path apis/v1alpha1 \
  --target out/apis \
  --exclude '.*\.managed.go' --exclude '.*_terraformed.go' \
  --clear --use-git
```

Options:

- `-m`, `--module` – module to read from, with `@version` (required)
- `-p`, `--path` – directory inside the module holding the API files (required)
- `-t`, `--target` – directory the files are copied to (required)
- `-e`, `--exclude` – regular expression for file names to skip; may be repeated
  or given as a comma-separated list
- `-c`, `--clear` – remove the target directory first
- `-g`, `--use-git` – clone `https://<module>` with `git` and check out the
  version tag, instead of using `go mod download`

Without `--use-git` the `go` toolchain must be installed; with it, `git` must be.
The command exits with status 1 on failure.

The same work is available from Python as
`crdgen.extract.extract(module, path, target, excludes=(), clear=False, use_git=False)`,
which returns the paths of the copied files and raises
`crdgen.extract.ExtractError` on failure. `keep(name, excludes)` and
`copy_file(src, dst)` are exposed as well.

## What this package does not do

It does not produce Go source text. There are no templates for type files or
for group/version registration files, and no command that turns CRDs into a
Go API package: `parse` and the `crdgen.render` helpers give you the struct
definitions and a way to write files, but rendering them into Go code is left to
the caller. Nor does it generate deepcopy methods.