"""Heuristic extractor — deterministic, model-free SIR generation.

Always available.  Identical input text yields an identical SIR: the
output carries no timestamps or random identifiers.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from famai.config import (
    DEFAULT_HEIGHT_FT,
    DEFAULT_INSET_FT,
    DEFAULT_LOD,
    DEFAULT_SILL_HEIGHT_FT,
    DEFAULT_WIDTH_FT,
    GENERIC_CATEGORY,
)
from famai.nlp.tokenizer import match_fields
from famai.sir.schema import (
    SIR,
    Extrusion,
    FamilyMetadata,
    FamilyParameter,
    FamilyType,
    GeometryDefinition,
    MaterialSpec,
    Parameters,
    Point2D,
    Point3D,
    VisibilitySettings,
)
from famai.units import to_canonical

logger = logging.getLogger(__name__)

DIMENSION_FIELDS = ("width", "height", "sill_height", "inset")

# Parameter-name fragment per dimension, and a fragment that disqualifies.
_FIELD_FRAGMENTS: dict[str, tuple[str, str | None]] = {
    "width": ("width", None),
    "height": ("height", "sill"),
    "sill_height": ("sill", None),
    "inset": ("inset", None),
}

# Category keywords, checked in priority order.
_CATEGORY_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("door", "Doors"),
    ("window", "Windows"),
    ("furniture", "Furniture"),
)

_GLASS_KEYWORDS = ("glass",)
_METAL_KEYWORDS = ("metal", "steel", "aluminum")
_WOOD_KEYWORDS = ("wood", "timber")

DOUBLE_HUNG = "DoubleHungWindow"
SLIDING = "SlidingDoubleWindow"
FIXED = "FixedWindow"

# Body depth along Z per category (feet).
_BODY_DEPTH_FT: dict[str, float] = {
    "Doors": 50 / 304.8,
    "Windows": 100 / 304.8,
}
_DEFAULT_BODY_DEPTH_FT = 100 / 304.8

_FRAME_WIDTH_FT = 0.15
_MIN_GLASS_THICKNESS_FT = 0.02

_DESCRIPTIONS: dict[str, str] = {
    "Doors": "Parametric door family",
    "Windows": "Parametric window family",
    "Furniture": "Parametric furniture family",
    GENERIC_CATEGORY: "Parametric family generated from natural language",
}

_GLASS_COLOR = "#87CEEB"
_SASH_COLOR = "#8B4513"


def infer_window_style(text: str) -> str:
    """Map free text (prompt, family name, category) to a window style name."""
    lowered = text.lower()
    if "sliding" in lowered:
        return SLIDING
    if "fixed" in lowered:
        return FIXED
    return DOUBLE_HUNG


def detect_category(text: str) -> str:
    lowered = text.lower()
    for keyword, category in _CATEGORY_KEYWORDS:
        if keyword in lowered:
            return category
    return GENERIC_CATEGORY


def detect_materials(text: str, glass: str = "Default", sash: str = "Default") -> tuple[str, str]:
    """Return ``(glass_material, sash_material)`` found in *text*.

    Wood is checked after metal, so it wins when both are mentioned.
    """
    lowered = text.lower()
    if any(k in lowered for k in _GLASS_KEYWORDS):
        glass = "Glass"
    if any(k in lowered for k in _METAL_KEYWORDS):
        sash = "Metal"
    if any(k in lowered for k in _WOOD_KEYWORDS):
        sash = "Wood"
    return glass, sash


class DesignValues(BaseModel):
    """The handful of values the heuristic path works with.  Lengths in feet."""

    width: float = DEFAULT_WIDTH_FT
    height: float = DEFAULT_HEIGHT_FT
    sill_height: float = DEFAULT_SILL_HEIGHT_FT
    inset: float = DEFAULT_INSET_FT
    category: str = GENERIC_CATEGORY
    window_style: str = DOUBLE_HUNG
    glass_material: str = "Default"
    sash_material: str = "Default"

    @classmethod
    def from_sir(cls, sir: SIR) -> DesignValues:
        """Read values back from an existing SIR, keeping defaults where absent."""
        values = cls()
        for field in DIMENSION_FIELDS:
            param = dimension_parameter(sir, field)
            if param is not None:
                setattr(values, field, float(param.default_value))

        glass = sir.parameter("GlassPaneMaterial")
        sash = sir.parameter("SashMaterial")
        if glass is not None and isinstance(glass.default_value, str):
            values.glass_material = glass.default_value
        if sash is not None and isinstance(sash.default_value, str):
            values.sash_material = sash.default_value
        if sir.category:
            values.category = sir.category
        values.window_style = infer_window_style(f"{sir.family_name} {sir.category}")
        return values


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        float(value)
    except (TypeError, ValueError):
        return False
    return True


def dimension_parameter(sir: SIR, field: str) -> FamilyParameter | None:
    """First numeric, formula-free parameter of *sir* that carries *field*."""
    fragment, exclude = _FIELD_FRAGMENTS[field]
    for param in sir.family_parameters:
        name = param.name.lower()
        if fragment not in name or (exclude and exclude in name):
            continue
        if not param.formula and _is_number(param.default_value):
            return param
    return None


def apply_report(sir: SIR, report: ExtractionReport) -> SIR:
    """Return a copy of *sir* with the values *report* matched patched in.

    Only the parameters carrying a matched dimension or a changed material
    are touched, together with their family-type bindings; geometry,
    formulas, other parameters and metadata are kept.
    """
    patched = sir.model_copy(deep=True)
    updates: dict[str, Any] = {}

    for field in report.matched:
        param = dimension_parameter(patched, field)
        if param is None:
            logger.debug("No %s parameter to refine in %s", field, sir.family_name)
            continue
        updates[param.name] = getattr(report.values, field)

    base = DesignValues.from_sir(sir)
    materials = (
        ("glass", report.values.glass_material, base.glass_material),
        ("sash", report.values.sash_material, base.sash_material),
    )
    for fragment, value, previous in materials:
        if value == previous:
            continue
        for param in patched.family_parameters:
            if param.param_type == "Material" and fragment in param.name.lower():
                updates[param.name] = value
        for material in patched.materials:
            label = f"{material.parameter_name or ''} {material.name}".lower()
            if fragment in label:
                material.name = value
                material.default_value = value

    for param in patched.family_parameters:
        if param.name in updates:
            param.default_value = updates[param.name]
    for family_type in patched.family_types:
        for name, value in updates.items():
            if name in family_type.parameters:
                family_type.parameters[name] = value
    return patched


class ExtractionReport(BaseModel):
    """What the extractor found and what it defaulted."""

    values: DesignValues = Field(default_factory=DesignValues)
    matched: dict[str, str] = Field(default_factory=dict)
    """field -> matched phrase, e.g. ``{"width": "900 mm wide"}``."""

    defaulted: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class HeuristicExtractor:
    """Pattern-based extractor producing a complete SIR from free text."""

    def analyze(self, text: str, base: DesignValues | None = None) -> ExtractionReport:
        """Scan *text* for dimensions, materials, category and window style.

        Fields that are not mentioned keep the value from *base* (the
        documented defaults when *base* is *None*).
        """
        values = base.model_copy() if base is not None else DesignValues()
        report = ExtractionReport()

        matches = match_fields(text)
        for field in DIMENSION_FIELDS:
            match = matches.get(field)
            if match is None:
                report.defaulted.append(field)
                continue
            feet = to_canonical(match.quantity.value, match.quantity.unit, report.warnings)
            setattr(values, field, feet)
            side = f"{match.quantity.label} {match.keyword.phrase}" if match.after \
                else f"{match.keyword.phrase} {match.quantity.label}"
            report.matched[field] = side
            logger.debug("Extracted %s: %s = %.4f ft", field, match.quantity.label, feet)

        category = detect_category(text)
        if category != GENERIC_CATEGORY or base is None:
            values.category = category
        values.glass_material, values.sash_material = detect_materials(
            text, values.glass_material, values.sash_material,
        )
        lowered = text.lower()
        if base is None or "sliding" in lowered or "fixed" in lowered or "double" in lowered:
            values.window_style = infer_window_style(text)

        report.values = values
        return report

    def extract(self, text: str, base: DesignValues | None = None) -> SIR:
        """Return a fully populated SIR for *text*."""
        return self.build(self.analyze(text, base).values)

    def build(self, values: DesignValues) -> SIR:
        """Assemble the SIR for a set of design values."""
        category = values.category
        family_label = {
            "Doors": "Door",
            "Windows": "Window",
            "Furniture": "Furniture",
        }.get(category, "Family")
        if category == "Windows" and values.window_style != DOUBLE_HUNG:
            style_word = "Sliding" if values.window_style == SLIDING else "Fixed"
            family_label = f"{style_word} Window"

        hosted = category in ("Doors", "Windows")
        extrusions = self._build_extrusions(values)
        names = [e.name for e in extrusions]

        params = [
            _length("Width", values.width, "Dimensions"),
            _length("Height", values.height, "Dimensions"),
            _length("SillHeight", values.sill_height, "Dimensions"),
            _length("Inset", values.inset, "Dimensions"),
            FamilyParameter(name="GlassPaneMaterial", param_type="Material",
                            group="Materials", default_value=values.glass_material),
            FamilyParameter(name="SashMaterial", param_type="Material",
                            group="Materials", default_value=values.sash_material),
        ]
        bindings: dict[str, Any] = {p.name: p.default_value for p in params}

        return SIR(
            family_metadata=FamilyMetadata(
                family_name=f"Generated {family_label}",
                category=category,
                description=_DESCRIPTIONS.get(category, _DESCRIPTIONS[GENERIC_CATEGORY]),
                lod_level=DEFAULT_LOD,
                is_hosted=hosted,
                hosting_type="Wall" if hosted else None,
            ),
            geometry_definition=GeometryDefinition(extrusions=extrusions),
            parameters=Parameters(
                family_parameters=params,
                family_types=[FamilyType(name="Type 1", parameters=bindings)],
            ),
            materials=[
                MaterialSpec(name=values.glass_material, parameter_name="GlassPaneMaterial",
                             default_value=values.glass_material, color=_GLASS_COLOR),
                MaterialSpec(name=values.sash_material, parameter_name="SashMaterial",
                             default_value=values.sash_material, color=_SASH_COLOR),
            ],
            visibility_settings=VisibilitySettings(
                coarse=list(names), medium=list(names), fine=list(names),
            ),
        )

    @staticmethod
    def _build_extrusions(values: DesignValues) -> list[Extrusion]:
        w, h = values.width, values.height
        depth = _BODY_DEPTH_FT.get(values.category, _DEFAULT_BODY_DEPTH_FT)
        extrusions = [
            Extrusion(
                name="MainBody",
                profile=_rectangle(0.0, 0.0, w, h),
                start_point=Point3D(),
                end_point=Point3D(x=w, y=h, z=depth),
                material=values.sash_material,
            ),
        ]
        if values.category == "Windows":
            frame = min(_FRAME_WIDTH_FT, w / 4, h / 4)
            z_start = values.inset
            z_end = max(depth - values.inset, z_start + _MIN_GLASS_THICKNESS_FT)
            extrusions.append(
                Extrusion(
                    name="GlassPane",
                    profile=_rectangle(frame, frame, w - frame, h - frame),
                    start_point=Point3D(x=frame, y=frame, z=z_start),
                    end_point=Point3D(x=w - frame, y=h - frame, z=z_end),
                    material=values.glass_material,
                )
            )
        return extrusions


def _length(name: str, value: float, group: str) -> FamilyParameter:
    return FamilyParameter(name=name, param_type="Length", group=group, default_value=value)


def _rectangle(x0: float, y0: float, x1: float, y1: float) -> list[Point2D]:
    return [Point2D(x=x0, y=y0), Point2D(x=x1, y=y0), Point2D(x=x1, y=y1), Point2D(x=x0, y=y1)]
