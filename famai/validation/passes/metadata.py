"""Metadata pass — required fields, LOD level, category, description."""

from __future__ import annotations

from famai.config import LOD_LEVELS, STANDARD_CATEGORIES
from famai.sir.schema import SIR
from famai.validation.passes.base import Findings, QAPass


class MetadataPass(QAPass):
    critical = True

    @property
    def name(self) -> str:
        return "metadata"

    @property
    def description(self) -> str:
        return "familyName, category and LOD present; LOD canonical; category known."

    def check(self, sir: SIR, code: str | None, findings: Findings) -> None:
        metadata = sir.family_metadata
        required = {
            "familyName": metadata.family_name if metadata else None,
            "category": metadata.category if metadata else None,
            "lodLevel": metadata.lod_level if metadata else None,
        }
        for field, value in required.items():
            if value is None or value == "":
                findings.issue("metadata.missing_field", f"Missing required metadata field: {field}")

        lod = required["lodLevel"]
        if lod is not None and lod not in LOD_LEVELS:
            levels = ", ".join(str(level) for level in LOD_LEVELS)
            findings.issue("metadata.invalid_lod", f"Invalid LOD level: {lod} (must be one of {levels})")

        category = required["category"]
        if category and category not in STANDARD_CATEGORIES:
            findings.warning("metadata.nonstandard_category", f"Non-standard category: {category}")

        if metadata is None or not metadata.description.strip():
            findings.warning("metadata.missing_description", "Missing family description")
