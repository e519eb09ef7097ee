[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "crdgen"
version = "0.1.0"
description = "Derive Go struct definitions from Kubernetes CustomResourceDefinition schemas and extract API files from Go modules"
requires-python = ">=3.10"
keywords = ["kubernetes", "crd", "openapi", "code-generation", "go"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Code Generators",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
extract-crd-api = "crdgen.extract:main"

[tool.hatch.build.targets.wheel]
packages = ["crdgen"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
