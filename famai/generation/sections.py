"""Section writers for the family-creation script.

Each writer takes a SIR and returns one block of script text.  Everything
after the setup section runs inside the script's ``try:`` block and is
indented one level.  Writers are pure: the same SIR always yields the
same text.
"""

from __future__ import annotations

import json
from typing import Any

from famai.errors import SIRStructureError
from famai.sir.schema import SIR, Extrusion

INDENT = "    "

# Extrusion roles.  Line prefixes let the optimization rules elide whole
# blocks by variable name.
PRIMARY = "extrusion"
DETAIL = "detail"
VOID = "void"

_SPEC_TYPES: dict[str, str] = {
    "Length": "SpecTypeId.Length",
    "Number": "SpecTypeId.Number",
    "Integer": "SpecTypeId.Int.Integer",
    "Text": "SpecTypeId.String.Text",
    "Material": "SpecTypeId.Reference.Material",
    "YesNo": "SpecTypeId.Boolean.YesNo",
}

_GROUPS: dict[str, str] = {
    "dimensions": "GroupTypeId.Geometry",
    "geometry": "GroupTypeId.Geometry",
    "constraints": "GroupTypeId.Constraints",
    "materials": "GroupTypeId.Materials",
    "identity": "GroupTypeId.IdentityData",
    "identity data": "GroupTypeId.IdentityData",
    "graphics": "GroupTypeId.Graphics",
}
_DEFAULT_GROUP = "GroupTypeId.Data"

DETAIL_LEVELS = ("coarse", "medium", "fine")


# ---------------------------------------------------------------------------
# Literal formatting
# ---------------------------------------------------------------------------

def quote(text: Any) -> str:
    """A double-quoted, escaped string literal."""
    return json.dumps("" if text is None else str(text))


def number(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    return repr(float(value))


def format_value(value: Any, param_type: str) -> str:
    """Format a parameter value as a literal for its declared type."""
    if param_type in ("Length", "Number"):
        try:
            return number(value)
        except (TypeError, ValueError):
            return quote(value)
    if param_type == "Integer":
        try:
            return str(int(float(value)))
        except (TypeError, ValueError):
            return quote(value)
    if param_type == "YesNo":
        if isinstance(value, str):
            return "True" if value.strip().lower() in ("true", "yes", "1") else "False"
        return "True" if value else "False"
    return quote(value)


def xyz(x: float, y: float, z: float) -> str:
    return f"XYZ({number(x)}, {number(y)}, {number(z)})"


def _indent(lines: list[str]) -> str:
    return "\n".join(f"{INDENT}{line}" if line else "" for line in lines)


def extrusion_role(sir: SIR, index: int) -> str:
    """PRIMARY for the first solid extrusion, VOID for voids, DETAIL otherwise."""
    extrusion = sir.extrusions[index]
    if not extrusion.is_solid:
        return VOID
    first_solid = next((i for i, e in enumerate(sir.extrusions) if e.is_solid), None)
    return PRIMARY if index == first_solid else DETAIL


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

def imports(sir: SIR) -> str:
    lines = [
        "import clr",
        'clr.AddReference("RevitAPI")',
        'clr.AddReference("RevitServices")',
        "",
        "from Autodesk.Revit.DB import *",
        "from RevitServices.Persistence import DocumentManager",
        "from RevitServices.Transactions import TransactionManager",
    ]
    category = sir.category
    if category in ("Doors", "Windows"):
        lines.append("from Autodesk.Revit.DB.Architecture import *")
    elif "Structural" in category:
        lines.append("from Autodesk.Revit.DB.Structure import *")
    lines.append("")
    lines.append(f"# Family: {sir.family_name}")
    return "\n".join(lines)


def family_setup(sir: SIR) -> str:
    metadata = sir.family_metadata
    if metadata is None:
        raise SIRStructureError("Missing familyMetadata in SIR")
    lines = [
        "# Family setup",
        "doc = DocumentManager.Instance.CurrentDBDocument",
        "family_manager = doc.FamilyManager",
        "",
        "TransactionManager.Instance.EnsureInTransaction(doc)",
        "",
        "try:",
        f"    family_name = {quote(metadata.family_name)}",
        f"    family_category = {quote(metadata.category)}",
        f"    family_description = {quote(metadata.description)}",
        f"    lod_level = {metadata.lod_level}",
        "",
        "    if not doc.IsFamilyDocument:",
        '        raise Exception("This script must run in a family document")',
        "",
        "    target_category = None",
        "    for cat in doc.Settings.Categories:",
        "        if cat.Name == family_category:",
        "            target_category = cat",
        "            break",
        "    if target_category is None:",
        '        raise Exception("Category not found: " + family_category)',
        "    if doc.OwnerFamily.FamilyCategory.Name != family_category:",
        "        doc.OwnerFamily.FamilyCategory = target_category",
    ]
    return "\n".join(lines)


def reference_planes(sir: SIR) -> str:
    lines = ["# Reference planes", "reference_planes = {}", ""]
    for plane in sir.reference_planes:
        o, n = plane.origin, plane.normal
        lines.append(f"# Reference plane: {plane.name}")
        lines.append(f"plane = Plane.CreateByNormalAndOrigin({xyz(n.x, n.y, n.z)}, {xyz(o.x, o.y, o.z)})")
        lines.append(f"reference_planes[{quote(plane.name)}] = plane")
        lines.append("")
    return _indent(lines)


def parameters(sir: SIR) -> str:
    lines = ["# Family parameters", "created_parameters = {}", ""]
    for param in sir.family_parameters:
        spec_type = _SPEC_TYPES.get(param.param_type, "SpecTypeId.Number")
        group = _GROUPS.get((param.group or "").lower(), _DEFAULT_GROUP)
        instance = "True" if param.is_instance else "False"
        lines.append(f"# Parameter: {param.name} ({param.param_type})")
        lines.append(
            f"param = family_manager.AddParameter({quote(param.name)}, {group}, {spec_type}, {instance})"
        )
        if param.default_value is not None and param.param_type != "Material":
            lines.append(f"family_manager.Set(param, {format_value(param.default_value, param.param_type)})")
        if param.formula:
            lines.append(f"family_manager.SetFormula(param, {quote(param.formula)})")
        lines.append(f"created_parameters[{quote(param.name)}] = param")
        lines.append("")
    return _indent(lines)


def _extrusion_block(extrusion: Extrusion, role: str) -> list[str]:
    s, e = extrusion.start_point, extrusion.end_point
    solid = "False" if role == VOID else "True"
    lines = [
        f"# Extrusion: {extrusion.name} ({role})",
        f"# From {xyz(s.x, s.y, s.z)} to {xyz(e.x, e.y, e.z)}",
        f"{role}_sketch = SketchPlane.Create(doc, Plane.CreateByNormalAndOrigin(XYZ(0, 0, 1), {xyz(0, 0, s.z)}))",
        f"{role}_curves = CurveArray()",
    ]
    profile = extrusion.profile
    for i, point in enumerate(profile):
        nxt = profile[(i + 1) % len(profile)]
        lines.append(
            f"{role}_curves.Append(Line.CreateBound({xyz(point.x, point.y, 0)}, {xyz(nxt.x, nxt.y, 0)}))"
        )
    lines.append(f"{role}_profile = CurveArrArray()")
    lines.append(f"{role}_profile.Append({role}_curves)")
    lines.append(
        f"{role}_obj = doc.FamilyCreate.NewExtrusion({solid}, {role}_profile, {role}_sketch, "
        f"{number(e.z - s.z)})"
    )
    if extrusion.material:
        lines.append(f"{role}_material[{quote(extrusion.name)}] = {quote(extrusion.material)}")
    lines.append(f"created_geometry[{quote(extrusion.name)}] = {role}_obj")
    lines.append("")
    return lines


def geometry(sir: SIR) -> str:
    lines = ["# Geometry", "created_geometry = {}"]
    roles = [extrusion_role(sir, i) for i in range(len(sir.extrusions))]
    for role in sorted(set(roles)):
        lines.append(f"{role}_material = {{}}")
    lines.append("")
    for extrusion, role in zip(sir.extrusions, roles):
        lines.extend(_extrusion_block(extrusion, role))
    return _indent(lines)


def constraints(sir: SIR) -> str:
    lines = ["# Constraints", "constraint_stubs = []", ""]
    for constraint in sir.constraints:
        lines.append(f"# Constraint: {constraint.element1} -> {constraint.element2}")
        lines.append(
            f"constraint_stubs.append(({quote(constraint.constraint_type)}, "
            f"{quote(constraint.element1)}, {quote(constraint.element2)}, {number(constraint.offset)}))"
        )
    lines.append("")
    return _indent(lines)


def materials(sir: SIR) -> str:
    lines = ["# Materials", "material_defaults = {}", ""]
    for material in sir.materials:
        parameter = material.parameter_name or f"{material.name}Material"
        lines.append(f"# Material: {material.name}")
        lines.append(f"if {quote(parameter)} not in created_parameters:")
        lines.append(
            f"    created_parameters[{quote(parameter)}] = family_manager.AddParameter("
            f"{quote(parameter)}, GroupTypeId.Materials, SpecTypeId.Reference.Material, True)"
        )
        lines.append(f"material_defaults[{quote(parameter)}] = {quote(material.default_value or material.name)}")
        lines.append("")
    return _indent(lines)


def family_types(sir: SIR) -> str:
    lines = ["# Family types", "created_types = {}", ""]
    declared = {p.name: p.param_type for p in sir.family_parameters}
    for family_type in sir.family_types:
        lines.append(f"# Family type: {family_type.name}")
        lines.append(f"created_types[{quote(family_type.name)}] = family_manager.NewType({quote(family_type.name)})")
        for name, value in family_type.parameters.items():
            param_type = declared.get(name, "Text")
            if param_type == "Material":
                continue
            lines.append(
                f"family_manager.Set(created_parameters[{quote(name)}], {format_value(value, param_type)})"
            )
        lines.append("")
    return _indent(lines)


def visibility(sir: SIR) -> str:
    lines = ["# Visibility", "visibility_groups = {"]
    settings = sir.visibility_settings
    for level in DETAIL_LEVELS:
        names = getattr(settings, level) if settings else []
        lines.append(f"    {quote(level)}: [{', '.join(quote(n) for n in names)}],")
    lines.append("}")
    return _indent(lines)


def validation(sir: SIR) -> str:
    lines = [
        "    # Validation",
        "    validation_results = {",
        '        "geometry_created": len(created_geometry) > 0,',
        '        "parameters_created": len(created_parameters) > 0,',
        '        "family_types_created": len(created_types) > 0,',
        "    }",
        '    print("Family creation results: " + str(validation_results))',
        "",
        "    TransactionManager.Instance.TransactionTaskDone()",
        '    print("Created family: " + family_name)',
        "",
        "except Exception as e:",
        '    print("Error creating family: " + str(e))',
        "    TransactionManager.Instance.TransactionTaskDone()",
        "    raise",
    ]
    return "\n".join(lines)


SECTION_WRITERS = (
    ("imports", imports),
    ("family_setup", family_setup),
    ("reference_planes", reference_planes),
    ("parameters", parameters),
    ("geometry", geometry),
    ("constraints", constraints),
    ("materials", materials),
    ("family_types", family_types),
    ("visibility", visibility),
    ("validation", validation),
)
