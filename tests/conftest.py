"""Shared fixtures: fake clock, sample SIRs, mock providers."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest

from famai.nlp.heuristic import HeuristicExtractor
from famai.nlp.providers.base import LLMProvider
from famai.sir.schema import SIR

WINDOW_PROMPT = (
    "Create a 900 mm wide, 1200 mm high double-hung window with 900 mm sill height"
)


class FakeClock:
    """Deterministic clock; call it for the time, ``advance`` to move it."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def sample_sir_dict(**metadata: Any) -> dict[str, Any]:
    """A small, valid SIR in wire (camelCase) form."""
    family_metadata = {
        "familyName": "Test Door",
        "category": "Doors",
        "description": "A simple door",
        "lodLevel": 300,
        "isHosted": True,
        "hostingType": "Wall",
    }
    family_metadata.update(metadata)
    return {
        "familyMetadata": family_metadata,
        "geometryDefinition": {
            "extrusions": [
                {
                    "name": "Panel",
                    "profile": [
                        {"x": 0, "y": 0}, {"x": 3, "y": 0}, {"x": 3, "y": 7}, {"x": 0, "y": 7},
                    ],
                    "startPoint": {"x": 0, "y": 0, "z": 0},
                    "endPoint": {"x": 3, "y": 7, "z": 0.15},
                    "material": "Wood",
                },
                {
                    "name": "Handle",
                    "profile": [
                        {"x": 2.5, "y": 3}, {"x": 2.7, "y": 3}, {"x": 2.7, "y": 3.5},
                    ],
                    "startPoint": {"x": 2.5, "y": 3, "z": 0.15},
                    "endPoint": {"x": 2.7, "y": 3.5, "z": 0.25},
                    "material": "Metal",
                },
            ],
            "referencePlanes": [
                {"name": "Center", "origin": {"x": 1.5, "y": 0, "z": 0}, "normal": {"x": 1, "y": 0, "z": 0}},
            ],
            "constraints": [
                {"element1": "Panel", "element2": "Center", "constraintType": "align", "offset": 0},
            ],
        },
        "parameters": {
            "familyParameters": [
                {"name": "Width", "type": "Length", "group": "Dimensions", "defaultValue": 3.0},
                {"name": "Height", "type": "Length", "group": "Dimensions", "defaultValue": 7.0},
                {"name": "Thickness", "type": "Length", "group": "Dimensions", "defaultValue": 0.15},
                {
                    "name": "HalfWidth", "type": "Length", "group": "Dimensions",
                    "defaultValue": 1.5, "formula": "Width / 2",
                },
                {"name": "PanelMaterial", "type": "Material", "group": "Materials", "defaultValue": "Wood"},
            ],
            "familyTypes": [
                {"name": "Standard", "parameters": {"Width": 3.0, "Height": 7.0, "Thickness": 0.15}},
            ],
        },
        "materials": [{"name": "Wood", "parameterName": "PanelMaterial", "defaultValue": "Wood"}],
        "visibilitySettings": {
            "coarse": ["Panel"], "medium": ["Panel", "Handle"], "fine": ["Panel", "Handle"],
        },
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sir_dict() -> dict[str, Any]:
    return sample_sir_dict()


@pytest.fixture
def door_sir(sir_dict: dict[str, Any]) -> SIR:
    return SIR.from_dict(sir_dict)


@pytest.fixture
def window_sir() -> SIR:
    return HeuristicExtractor().extract(WINDOW_PROMPT)


@pytest.fixture
def model_provider(sir_dict: dict[str, Any]) -> MagicMock:
    """Available provider whose reply wraps a valid SIR in prose."""
    provider = MagicMock(spec=LLMProvider)
    provider.is_available.return_value = True
    provider.complete.return_value = f"Here is the family:\n```json\n{json.dumps(sir_dict)}\n```"
    return provider
