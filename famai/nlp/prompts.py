"""Prompt templates for the language-model collaborator."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

SIR_SCHEMA = """\
{
  "familyMetadata": {
    "familyName": "string",
    "category": "string (e.g., 'Doors', 'Windows', 'Furniture')",
    "description": "string",
    "lodLevel": "number (100, 200, 300, 400 or 500)",
    "isHosted": "boolean",
    "hostingType": "string (if hosted)"
  },
  "geometryDefinition": {
    "extrusions": [
      {
        "name": "string",
        "startPoint": {"x": 0, "y": 0, "z": 0},
        "endPoint": {"x": 0, "y": 0, "z": 0},
        "profile": [{"x": 0, "y": 0}],
        "material": "string",
        "isSolid": true
      }
    ],
    "referencePlanes": [
      {
        "name": "string",
        "origin": {"x": 0, "y": 0, "z": 0},
        "normal": {"x": 0, "y": 0, "z": 1},
        "locked": true
      }
    ],
    "constraints": [
      {
        "element1": "string",
        "element2": "string",
        "constraintType": "align | lock | dimension",
        "offset": 0
      }
    ]
  },
  "parameters": {
    "familyParameters": [
      {
        "name": "string (letters, digits, underscore; starts with a letter)",
        "type": "Length | Number | Text | Material | YesNo | Integer",
        "group": "string",
        "isInstance": true,
        "defaultValue": "any",
        "formula": "string (optional)"
      }
    ],
    "sharedParameters": [],
    "familyTypes": [
      {
        "name": "string",
        "parameters": {}
      }
    ]
  },
  "materials": [
    {
      "name": "string",
      "parameterName": "string",
      "defaultValue": "string"
    }
  ],
  "nestedFamilies": [],
  "visibilitySettings": {
    "coarse": ["element names"],
    "medium": ["element names"],
    "fine": ["element names"]
  }
}"""

SYSTEM_PROMPT = """\
You are a BIM family programmer.  Convert a natural-language description of
a building component into a Structured Intermediate Representation (SIR).

Rules:
1. Output ONLY one JSON object following the SIR schema below.  No prose, no markdown.
2. You describe the family; you do not generate geometry files.
3. Keep consistent with the previous context of this session.
4. Infer implicit requirements: doors and windows are wall-hosted, windows
   carry a sill height, furniture carries material parameters.
5. All lengths are in feet.  1 ft = 304.8 mm = 12 in = 30.48 cm.

SIR schema:
{schema}

Previous context:
{context}
"""

REFINEMENT_PROMPT = """\
Refine the existing SIR according to the feedback.  Keep every valid aspect
of the original design and change only what the feedback asks for.

FEEDBACK: {feedback}

ORIGINAL SIR:
{sir}

Output ONLY the updated SIR as one JSON object.
"""

VARIATION_PROMPT = """\
Create variation {index} of this BIM family design.  Vary dimensions,
materials or parametric relationships while keeping the core function and
the SIR schema.

BASE SIR:
{sir}

Output ONLY the new SIR as one JSON object.
"""


@dataclass(frozen=True)
class ModelPrompt:
    """One model request: standing instructions plus the user turn."""

    system: str
    user: str


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


def build_system_prompt(context: dict[str, Any] | None = None) -> str:
    return SYSTEM_PROMPT.format(schema=SIR_SCHEMA, context=_dump(context or {}))


def build_generation_prompt(user_prompt: str, context: dict[str, Any] | None = None) -> ModelPrompt:
    return ModelPrompt(build_system_prompt(context), f"User request: {user_prompt}")


def build_refinement_prompt(feedback: str, sir: dict[str, Any], context: dict[str, Any]) -> ModelPrompt:
    return ModelPrompt(
        build_system_prompt(context),
        REFINEMENT_PROMPT.format(feedback=feedback, sir=_dump(sir)),
    )


def build_variation_prompt(sir: dict[str, Any], index: int) -> ModelPrompt:
    return ModelPrompt(build_system_prompt(), VARIATION_PROMPT.format(index=index, sir=_dump(sir)))
