"""Derive Go struct definitions from Kubernetes CRD schemas and extract API files from Go modules."""

__version__ = "0.1.0"