"""Suggestion lookup for QA recommendations.

Suggestions are keyed by pass name and matched against the finding text
by case-insensitive substring.  The first matching entry wins; a pass
default applies when nothing matches.
"""

from __future__ import annotations

from famai.validation.result import Recommendation, ValidationResult

_SUGGESTIONS: dict[str, tuple[tuple[str, str], ...]] = {
    "geometry": (
        ("no extrusions", "Add at least one extrusion describing the main body"),
        ("invalid profile", "Ensure extrusion profiles have at least 3 points forming a closed loop"),
        ("height", "Give every extrusion distinct start and end Z coordinates"),
        ("normal", "Use unit-length normal vectors for reference planes"),
        ("constraint", "Reference existing extrusions or reference planes in constraints"),
        ("high complexity", "Reduce the number of profile points per extrusion"),
        ("complex geometry", "For LOD 200 families, use simple symbolic geometry instead of detailed 3D models"),
        ("more detailed", "Add secondary geometry (frames, panels, hardware) for high-LOD families"),
    ),
    "parameters": (
        ("no family parameters", "Define at least the driving dimensions as family parameters"),
        ("duplicate", "Give every family parameter a unique name"),
        ("name format", "Use alphanumeric names starting with a letter, avoid special characters"),
        ("invalid parameter type", "Use one of Length, Number, Text, Material, YesNo or Integer"),
        ("formula", "Reference only defined parameters and use arithmetic or comparison operators"),
        ("empty name", "Name every family type"),
        ("invalid value", "Match family type values to the declared parameter type"),
        ("essential", "Add the parameters expected for this category"),
    ),
    "performance": (
        ("anti-pattern", "Avoid unbounded loops in generated code"),
        ("code complexity", "Simplify the generated script or split the family"),
        ("geometry complexity", "Consider simplifying geometry or reducing profile points"),
        ("parameter count", "Consider simplifying geometry or reducing parameter count for better performance"),
        ("minimal geometry", "Keep LOD 200 families to two extrusions or fewer"),
    ),
    "flexing": (
        ("scenario failed", "Check formulas that depend on flexed parameters"),
        ("constraint", "Give every constraint two element references"),
    ),
    "metadata": (
        ("missing required", "Provide familyName, category and lodLevel"),
        ("lod", "Use standard LOD levels: 100, 200, 300, 400, or 500"),
        ("non-standard category", "Use a standard category such as Doors, Windows or Furniture"),
        ("description", "Add a short family description"),
    ),
}

_DEFAULTS: dict[str, str] = {
    "geometry": "Review the geometry definition",
    "parameters": "Review the parameter definitions",
    "performance": "Review the family for performance",
    "compliance": "Review compliance requirements",
    "flexing": "Flex the family across its parameter range",
    "metadata": "Complete the family metadata",
}


def suggest(pass_name: str, finding: str) -> str:
    """Return the suggestion for one finding of *pass_name*."""
    lowered = finding.lower()
    for fragment, suggestion in _SUGGESTIONS.get(pass_name, ()):
        if fragment in lowered:
            return suggestion
    return _DEFAULTS.get(pass_name, f"Review the {pass_name} findings")


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def build_recommendations(validations: dict[str, ValidationResult]) -> list[Recommendation]:
    """One high-priority recommendation per pass with issues, one medium per pass with warnings."""
    recommendations: list[Recommendation] = []
    for name, result in validations.items():
        if result.issues:
            recommendations.append(Recommendation(
                pass_name=name,
                priority="high",
                findings=list(result.issues),
                suggestions=_unique([suggest(name, i) for i in result.issues]),
            ))
        if result.warnings:
            recommendations.append(Recommendation(
                pass_name=name,
                priority="medium",
                findings=list(result.warnings),
                suggestions=_unique([suggest(name, w) for w in result.warnings]),
            ))
    return recommendations
