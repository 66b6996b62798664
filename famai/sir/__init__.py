"""Structured Intermediate Representation — schema and structural checks."""

from famai.sir.schema import (
    SIR,
    Constraint,
    Extrusion,
    FamilyMetadata,
    FamilyParameter,
    FamilyType,
    GeometryDefinition,
    MaterialSpec,
    Parameters,
    Point2D,
    Point3D,
    ReferencePlane,
    VisibilitySettings,
)
from famai.sir.structure import (
    build_sir,
    check_emittable,
    check_structure,
    extract_json_object,
    parse_sir_response,
)

__all__ = [
    "SIR",
    "Constraint",
    "Extrusion",
    "FamilyMetadata",
    "FamilyParameter",
    "FamilyType",
    "GeometryDefinition",
    "MaterialSpec",
    "Parameters",
    "Point2D",
    "Point3D",
    "ReferencePlane",
    "VisibilitySettings",
    "build_sir",
    "check_emittable",
    "check_structure",
    "extract_json_object",
    "parse_sir_response",
]
