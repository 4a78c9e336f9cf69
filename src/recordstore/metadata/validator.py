"""
JSON Schema validation for resource YAML files.

Usage:
    from recordstore.metadata.validator import validate_metadata_dir

    issues = validate_metadata_dir(Path("metadata"))
    for issue in issues:
        print(issue)
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

_SCHEMAS_DIR = Path(__file__).parent / "schemas"
RESOURCE_SCHEMA = "resource.schema.json"


@dataclass
class ValidationIssue:
    """A single validation finding for a metadata file."""

    file: Path
    message: str
    path: str = ""
    severity: str = "error"

    def __str__(self) -> str:
        location = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{location}: {self.message}"


def _load_schema(name: str) -> dict[str, Any]:
    with (_SCHEMAS_DIR / name).open() as fh:
        return json.load(fh)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def validate_yaml_file(yaml_path: Path) -> list[ValidationIssue]:
    """
    Validate a single resource YAML file.

    Returns:
        A list of :class:`ValidationIssue` objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            doc = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if doc is None:
        return [
            ValidationIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    validator = Draft202012Validator(_load_schema(RESOURCE_SCHEMA))
    return [
        ValidationIssue(file=yaml_path, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(doc), key=lambda e: list(e.path))
    ]


def validate_metadata_dir(metadata_dir: Path) -> list[ValidationIssue]:
    """
    Validate every ``resources/*.yaml`` file under *metadata_dir*.

    Returns:
        A flat list of issues across all files. Empty means all files are valid.
    """
    if not metadata_dir.is_dir():
        return [
            ValidationIssue(
                file=metadata_dir,
                message=f"Metadata directory does not exist: {metadata_dir}",
            )
        ]

    target = metadata_dir / "resources"
    if not target.is_dir():
        return [
            ValidationIssue(
                file=target,
                message="No resources/ directory found",
                severity="warning",
            )
        ]

    all_issues: list[ValidationIssue] = []
    for yaml_file in sorted(target.glob("*.yaml")):
        all_issues.extend(validate_yaml_file(yaml_file))
    return all_issues
