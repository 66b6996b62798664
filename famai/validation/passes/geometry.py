"""Geometry pass — extrusions, reference planes, constraints, LOD fit."""

from __future__ import annotations

import math

from famai.config import MAX_PROFILE_POINTS_PER_EXTRUSION
from famai.sir.schema import SIR
from famai.validation.passes.base import Findings, QAPass

_NORMAL_TOLERANCE = 1e-3

# LOD-dependent extrusion counts.
_LOW_LOD = 200
_LOW_LOD_MAX_EXTRUSIONS = 3
_HIGH_LOD = 400
_HIGH_LOD_MIN_EXTRUSIONS = 2


class GeometryPass(QAPass):
    critical = True

    @property
    def name(self) -> str:
        return "geometry"

    @property
    def description(self) -> str:
        return "Extrusion profiles and heights, plane normals, constraint references."

    def check(self, sir: SIR, code: str | None, findings: Findings) -> None:
        extrusions = sir.extrusions
        if not extrusions:
            findings.issue("geometry.no_extrusions", "No extrusions defined in geometry")

        for index, extrusion in enumerate(extrusions):
            label = extrusion.name or f"#{index}"
            points = len(extrusion.profile)
            if points < 3:
                findings.issue(
                    "geometry.invalid_profile",
                    f"Extrusion {label} has invalid profile (minimum 3 points required, got {points})",
                )
            if extrusion.height <= 0:
                findings.issue("geometry.zero_height", f"Extrusion {label} has zero or negative height")
            if points > MAX_PROFILE_POINTS_PER_EXTRUSION:
                findings.warning(
                    "geometry.complex_profile",
                    f"Extrusion {label} has high complexity ({points} points)",
                )

        for plane in sir.reference_planes:
            n = plane.normal
            magnitude = math.sqrt(n.x * n.x + n.y * n.y + n.z * n.z)
            if abs(magnitude - 1.0) > _NORMAL_TOLERANCE:
                findings.issue(
                    "geometry.invalid_normal",
                    f"Reference plane {plane.name} has invalid normal vector (length {magnitude:.4f})",
                )

        names = sir.element_names()
        for index, constraint in enumerate(sir.constraints):
            missing = [
                ref for ref in (constraint.element1, constraint.element2)
                if not ref or ref not in names
            ]
            if missing:
                refs = ", ".join(repr(m) for m in missing)
                findings.issue(
                    "geometry.invalid_constraint",
                    f"Constraint {index} references missing elements: {refs}",
                )

        lod = sir.lod_level
        if lod is None:
            return
        if lod <= _LOW_LOD and len(extrusions) > _LOW_LOD_MAX_EXTRUSIONS:
            findings.warning(
                "geometry.lod_mismatch",
                f"LOD {lod} family has complex geometry ({len(extrusions)} extrusions); consider simplification",
            )
        elif lod >= _HIGH_LOD and len(extrusions) < _HIGH_LOD_MIN_EXTRUSIONS:
            findings.warning(
                "geometry.lod_mismatch",
                f"LOD {lod} family may need more detailed geometry",
            )
