"""SIR — the Structured Intermediate Representation of one parametric family.

The models mirror the JSON contract given to the language model
(camelCase on the wire, snake_case in Python).  They are deliberately
permissive: a SIR that violates an invariant can still be loaded so
the QA gateway can score it.  Hard structural checks live in
:mod:`famai.sir.structure`.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SIRModel(BaseModel):
    """Base for SIR parts: camelCase aliases, unknown keys preserved."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Point2D(SIRModel):
    x: float = 0.0
    y: float = 0.0


class Point3D(SIRModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class FamilyMetadata(SIRModel):
    family_name: str = ""
    category: str = ""
    description: str = ""
    lod_level: Optional[int] = None
    is_hosted: bool = False
    hosting_type: Optional[str] = None


class Extrusion(SIRModel):
    """A closed 2D profile swept between two points along Z."""

    name: str = ""
    profile: list[Point2D] = Field(default_factory=list)
    start_point: Point3D = Field(default_factory=Point3D)
    end_point: Point3D = Field(default_factory=Point3D)
    material: Optional[str] = None
    is_solid: bool = True

    @property
    def height(self) -> float:
        return abs(self.end_point.z - self.start_point.z)


class ReferencePlane(SIRModel):
    name: str = ""
    origin: Point3D = Field(default_factory=Point3D)
    normal: Point3D = Field(default_factory=lambda: Point3D(z=1.0))
    locked: bool = True


class Constraint(SIRModel):
    element1: Optional[str] = None
    element2: Optional[str] = None
    constraint_type: str = "align"
    offset: float = 0.0


class GeometryDefinition(SIRModel):
    extrusions: list[Extrusion] = Field(default_factory=list)
    reference_planes: list[ReferencePlane] = Field(default_factory=list)
    constraints: list[Constraint] = Field(default_factory=list)
    blends: list[Any] = Field(default_factory=list)
    sweeps: list[Any] = Field(default_factory=list)
    revolves: list[Any] = Field(default_factory=list)


class FamilyParameter(SIRModel):
    name: str = ""
    param_type: str = Field(default="Length", alias="type")
    group: Optional[str] = None
    is_instance: bool = True
    default_value: Any = None
    formula: Optional[str] = None


class FamilyType(SIRModel):
    name: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)


class Parameters(SIRModel):
    family_parameters: list[FamilyParameter] = Field(default_factory=list)
    shared_parameters: list[Any] = Field(default_factory=list)
    family_types: list[FamilyType] = Field(default_factory=list)


class MaterialSpec(SIRModel):
    name: str = ""
    parameter_name: Optional[str] = None
    default_value: Optional[str] = None
    color: Optional[str] = None


class VisibilitySettings(SIRModel):
    coarse: list[str] = Field(default_factory=list)
    medium: list[str] = Field(default_factory=list)
    fine: list[str] = Field(default_factory=list)


class SIR(SIRModel):
    """One parametric component.

    ``family_metadata``, ``geometry_definition`` and ``parameters`` may be
    *None* when a caller hands in an incomplete document; the accessors
    below return empty collections in that case.
    """

    family_metadata: Optional[FamilyMetadata] = None
    geometry_definition: Optional[GeometryDefinition] = None
    parameters: Optional[Parameters] = None
    materials: list[MaterialSpec] = Field(default_factory=list)
    nested_families: list[Any] = Field(default_factory=list)
    visibility_settings: Optional[VisibilitySettings] = None

    # -- serialisation ----------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SIR:
        return cls.model_validate(data)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire (camelCase) representation."""
        return self.model_dump(by_alias=True, mode="json")

    # -- accessors --------------------------------------------------------

    @property
    def family_name(self) -> str:
        return self.family_metadata.family_name if self.family_metadata else ""

    @property
    def category(self) -> str:
        return self.family_metadata.category if self.family_metadata else ""

    @property
    def lod_level(self) -> int | None:
        return self.family_metadata.lod_level if self.family_metadata else None

    @property
    def extrusions(self) -> list[Extrusion]:
        return self.geometry_definition.extrusions if self.geometry_definition else []

    @property
    def reference_planes(self) -> list[ReferencePlane]:
        return self.geometry_definition.reference_planes if self.geometry_definition else []

    @property
    def constraints(self) -> list[Constraint]:
        return self.geometry_definition.constraints if self.geometry_definition else []

    @property
    def family_parameters(self) -> list[FamilyParameter]:
        return self.parameters.family_parameters if self.parameters else []

    @property
    def family_types(self) -> list[FamilyType]:
        return self.parameters.family_types if self.parameters else []

    def parameter(self, name: str) -> FamilyParameter | None:
        """Return the first family parameter called *name*."""
        for param in self.family_parameters:
            if param.name == name:
                return param
        return None

    def find_parameter(self, fragment: str) -> FamilyParameter | None:
        """Return the first parameter whose name contains *fragment*, case-insensitively."""
        fragment = fragment.lower()
        for param in self.family_parameters:
            if fragment in param.name.lower():
                return param
        return None

    def element_names(self) -> set[str]:
        """Names that a geometric constraint may refer to."""
        names = {e.name for e in self.extrusions if e.name}
        names.update(p.name for p in self.reference_planes if p.name)
        return names
