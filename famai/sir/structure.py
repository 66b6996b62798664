"""Structural checks and model-reply parsing for SIR documents."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from famai.config import EMITTER_REQUIRED_SECTIONS, LOD_LEVELS, REQUIRED_SIR_SECTIONS
from famai.errors import ModelResponseError, SIRStructureError
from famai.sir.schema import SIR

logger = logging.getLogger(__name__)


def extract_json_object(text: str | None) -> dict[str, Any]:
    """Return the JSON object spanning the first ``{`` to the last ``}`` of *text*.

    Surrounding prose and markdown fences are tolerated.
    """
    if not text:
        raise ModelResponseError("Empty model response")
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ModelResponseError("No JSON object found in model response")
    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as exc:
        raise ModelResponseError(f"Invalid JSON in model response: {exc}") from exc
    if not isinstance(data, dict):
        raise ModelResponseError("Model response JSON is not an object")
    return data


def check_structure(data: dict[str, Any]) -> None:
    """Raise :class:`SIRStructureError` unless *data* has the SIR skeleton.

    Checks the required top-level sections, a non-empty family name and
    category, and the LOD range.
    """
    for section in REQUIRED_SIR_SECTIONS:
        if data.get(section) is None:
            raise SIRStructureError(f"Missing required SIR field: {section}")

    metadata = data["familyMetadata"]
    if not isinstance(metadata, dict):
        raise SIRStructureError("familyMetadata must be an object")
    if not metadata.get("familyName") or not metadata.get("category"):
        raise SIRStructureError("Missing required family metadata (familyName, category)")

    lod = metadata.get("lodLevel")
    try:
        lod_value = int(lod)
    except (TypeError, ValueError):
        raise SIRStructureError(f"LOD level must be a number, got {lod!r}") from None
    if lod_value < LOD_LEVELS[0] or lod_value > LOD_LEVELS[-1]:
        raise SIRStructureError(
            f"LOD level must be between {LOD_LEVELS[0]} and {LOD_LEVELS[-1]}, got {lod_value}"
        )


def build_sir(data: dict[str, Any]) -> SIR:
    """Structurally check *data* and load it as a :class:`SIR`."""
    check_structure(data)
    try:
        return SIR.from_dict(data)
    except ValidationError as exc:
        raise SIRStructureError(f"SIR does not match schema: {exc.error_count()} errors") from exc


def parse_sir_response(text: str | None) -> SIR:
    """Parse a raw model reply into a structurally valid :class:`SIR`."""
    return build_sir(extract_json_object(text))


def check_emittable(sir: SIR | dict[str, Any]) -> SIR:
    """Return *sir* as a model, failing closed when emission sections are missing."""
    if isinstance(sir, dict):
        for section in EMITTER_REQUIRED_SECTIONS:
            if sir.get(section) is None:
                raise SIRStructureError(f"Missing {section} in SIR")
        try:
            sir = SIR.from_dict(sir)
        except ValidationError as exc:
            raise SIRStructureError(f"SIR does not match schema: {exc.error_count()} errors") from exc

    if sir.family_metadata is None:
        raise SIRStructureError("Missing familyMetadata in SIR")
    if sir.geometry_definition is None:
        raise SIRStructureError("Missing geometryDefinition in SIR")
    if sir.parameters is None:
        raise SIRStructureError("Missing parameters in SIR")

    lod = sir.lod_level
    if lod is None or lod < LOD_LEVELS[0] or lod > LOD_LEVELS[-1]:
        raise SIRStructureError(f"Invalid LOD level: {lod}")
    return sir
