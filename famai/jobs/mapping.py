"""SIR -> execution-backend parameters."""

from __future__ import annotations

import logging
from typing import Any

from famai.config import (
    DEFAULT_HEIGHT_FT,
    DEFAULT_INSET_FT,
    DEFAULT_SILL_HEIGHT_FT,
    DEFAULT_WIDTH_FT,
    GENERIC_CATEGORY,
)
from famai.nlp.heuristic import infer_window_style
from famai.sir.schema import SIR

logger = logging.getLogger(__name__)

WINDOW_FAMILY_TYPE = 1
DEFAULT_MATERIAL = "Default"


def _number(sir: SIR, fragment: str, default: float) -> float:
    param = sir.find_parameter(fragment)
    if param is None:
        return default
    try:
        return float(param.default_value)
    except (TypeError, ValueError):
        logger.debug("Parameter %s is not numeric; using %s", param.name, default)
        return default


def _material(sir: SIR, *fragments: str) -> str:
    for material in sir.materials:
        label = f"{material.parameter_name or ''} {material.name}".lower()
        if any(f in label for f in fragments):
            return material.default_value or material.name or DEFAULT_MATERIAL
    return DEFAULT_MATERIAL


def sir_to_backend_params(sir: SIR) -> dict[str, Any]:
    """Flatten *sir* into the parameter map the family-creation activity reads.

    Width and height come from the first parameters whose names contain
    ``width`` / ``height`` (case-insensitive), defaulting to 2 ft / 4 ft.
    """
    family_name = sir.family_name or "Generated Family"
    category = sir.category or GENERIC_CATEGORY
    file_name = f"{family_name}.rfa"
    type_name = sir.family_types[0].name if sir.family_types and sir.family_types[0].name else "Type 1"

    return {
        "FileName": file_name,
        "FamilyType": WINDOW_FAMILY_TYPE,
        "Category": category,
        "WindowParams": {
            "WindowStyle": infer_window_style(f"{family_name} {category}"),
            "GlassPaneMaterial": _material(sir, "glass"),
            "SashMaterial": _material(sir, "sash", "frame"),
            "WindowFamilyName": file_name,
            "Types": [{
                "TypeName": type_name,
                "WindowWidth": _number(sir, "width", DEFAULT_WIDTH_FT),
                "WindowHeight": _number(sir, "height", DEFAULT_HEIGHT_FT),
                "WindowInset": _number(sir, "inset", DEFAULT_INSET_FT),
                "WindowSillHeight": _number(sir, "sill", DEFAULT_SILL_HEIGHT_FT),
            }],
        },
    }
