"""Global configuration: constants, environment settings, logging setup."""

from __future__ import annotations

import logging
import os
from typing import Any

from pydantic import BaseModel

# ---------------------------------------------------------------------------
# Units and heuristic defaults (feet)
# ---------------------------------------------------------------------------

CANONICAL_UNIT = "ft"

DEFAULT_WIDTH_FT = 2.0
DEFAULT_HEIGHT_FT = 4.0
DEFAULT_SILL_HEIGHT_FT = 3.0
DEFAULT_INSET_FT = 0.05

# ---------------------------------------------------------------------------
# SIR vocabulary
# ---------------------------------------------------------------------------

LOD_LEVELS = (100, 200, 300, 400, 500)
DEFAULT_LOD = 200

GENERIC_CATEGORY = "Generic"

# Known family categories.  Anything else is a metadata warning.
STANDARD_CATEGORIES = (
    "Doors",
    "Windows",
    "Furniture",
    "Structural Framing",
    "Structural Columns",
    "Mechanical Equipment",
    "Electrical Equipment",
    "Plumbing Fixtures",
)

# Structural checks accept the standard set plus the generic fallback.
ALLOWED_CATEGORIES = STANDARD_CATEGORIES + (GENERIC_CATEGORY,)

PARAMETER_TYPES = ("Length", "Number", "Text", "Material", "YesNo", "Integer")

PARAMETER_NAME_PATTERN = r"^[A-Za-z][A-Za-z0-9_]*$"

REQUIRED_SIR_SECTIONS = (
    "familyMetadata",
    "geometryDefinition",
    "parameters",
    "materials",
    "visibilitySettings",
)

# Sections the code emitter cannot work without.
EMITTER_REQUIRED_SECTIONS = ("familyMetadata", "geometryDefinition", "parameters")

# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

MAX_HISTORY_TURNS = 10
CONTEXT_TURNS = 3

# ---------------------------------------------------------------------------
# QA point deductions, overridable per gateway.
# Structural defects deduct more than stylistic warnings.
# ---------------------------------------------------------------------------

DEFAULT_DEDUCTIONS: dict[str, int] = {
    # geometry
    "geometry.no_extrusions": 30,
    "geometry.invalid_profile": 20,
    "geometry.zero_height": 15,
    "geometry.invalid_normal": 10,
    "geometry.invalid_constraint": 10,
    "geometry.complex_profile": 5,
    "geometry.lod_mismatch": 5,
    # parameters
    "parameters.none_defined": 40,
    "parameters.duplicate_name": 15,
    "parameters.invalid_name": 10,
    "parameters.invalid_type": 10,
    "parameters.invalid_formula": 10,
    "parameters.empty_type_name": 10,
    "parameters.invalid_value": 5,
    "parameters.missing_essential": 5,
    # performance
    "performance.loop_antipattern": 20,
    "performance.profile_points": 15,
    "performance.code_complexity": 10,
    "performance.parameter_count": 10,
    "performance.lod_geometry": 10,
    # flexing
    "flexing.scenario_failed": 15,
    "flexing.constraint_missing": 10,
    # metadata
    "metadata.invalid_lod": 25,
    "metadata.missing_field": 20,
    "metadata.nonstandard_category": 5,
    "metadata.missing_description": 5,
}

MAX_PROFILE_POINTS_PER_EXTRUSION = 20
MAX_TOTAL_PROFILE_POINTS = 100
MAX_PARAMETERS = 20
MAX_CODE_COMPLEXITY = 50

# ---------------------------------------------------------------------------
# Code emission
# ---------------------------------------------------------------------------

BASE_EXECUTION_SECONDS = 30
SECONDS_PER_EXTRUSION = 5
SECONDS_PER_PARAMETER = 2
SECONDS_PER_FAMILY_TYPE = 3
MAX_EXECUTION_SECONDS = 300

# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------

SIMULATED_JOB_SECONDS = 15.0
SIMULATED_JOB_PREFIX = "sim_"

# ---------------------------------------------------------------------------
# Environment settings
# ---------------------------------------------------------------------------

_CONFIG_KEYS: dict[str, dict[str, Any]] = {
    "FAMAI_ENV": {"default": "development", "description": "Environment profile"},
    "FAMAI_LOG_LEVEL": {"default": "INFO", "description": "Logging level"},
    "FAMAI_LLM_PROVIDER": {"default": "gemini", "description": "gemini, ollama or none"},
    "GEMINI_API_KEY": {"default": "", "description": "Gemini API key (secret)"},
    "FAMAI_GEMINI_MODEL": {"default": "gemini-2.5-flash", "description": "Gemini model name"},
    "OLLAMA_HOST": {"default": "http://localhost:11434", "description": "Ollama LLM server"},
    "FAMAI_OLLAMA_MODEL": {"default": "mistral", "description": "Ollama model name"},
    "APS_CLIENT_ID": {"default": "", "description": "APS client id (secret)"},
    "APS_CLIENT_SECRET": {"default": "", "description": "APS client secret (secret)"},
    "APS_DA_ENDPOINT": {
        "default": "https://developer.api.autodesk.com/da/us-east/v3/",
        "description": "Design Automation endpoint",
    },
    "APS_DA_ACTIVITY": {"default": "", "description": "Fully qualified activity id"},
    "APS_TEMPLATE_URL": {"default": "", "description": "Family template URL"},
    "FAMAI_SIMULATED_JOB_SECONDS": {
        "default": str(SIMULATED_JOB_SECONDS),
        "description": "Duration of a simulated job",
    },
}

_PROFILES: dict[str, dict[str, str]] = {
    "development": {
        "FAMAI_ENV": "development",
        "FAMAI_LOG_LEVEL": "DEBUG",
    },
    "production": {
        "FAMAI_ENV": "production",
        "FAMAI_LOG_LEVEL": "WARNING",
    },
    "testing": {
        "FAMAI_ENV": "testing",
        "FAMAI_LOG_LEVEL": "DEBUG",
        "FAMAI_LLM_PROVIDER": "none",
    },
}


class Settings(BaseModel):
    """Resolved runtime settings."""

    env: str = "development"
    log_level: str = "INFO"
    llm_provider: str = "gemini"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "mistral"
    aps_client_id: str = ""
    aps_client_secret: str = ""
    aps_da_endpoint: str = ""
    aps_da_activity: str = ""
    aps_template_url: str = ""
    simulated_job_seconds: float = SIMULATED_JOB_SECONDS

    @property
    def backend_configured(self) -> bool:
        """True when every setting the real execution backend needs is present."""
        return all((
            self.aps_client_id,
            self.aps_client_secret,
            self.aps_da_endpoint,
            self.aps_da_activity,
            self.aps_template_url,
        ))


def load_config(environ: dict[str, str] | None = None) -> dict[str, str]:
    """Load merged config: defaults -> profile -> environment variables.

    Returns a flat dict of configuration values.
    """
    env = os.environ if environ is None else environ
    config: dict[str, str] = {key: str(info["default"]) for key, info in _CONFIG_KEYS.items()}

    env_name = env.get("FAMAI_ENV", config["FAMAI_ENV"])
    config.update(_PROFILES.get(env_name, {}))

    for key in _CONFIG_KEYS:
        value = env.get(key)
        if value is not None:
            config[key] = value

    return config


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from :func:`load_config`."""
    config = load_config(environ)
    try:
        job_seconds = float(config["FAMAI_SIMULATED_JOB_SECONDS"])
    except ValueError:
        job_seconds = SIMULATED_JOB_SECONDS
    return Settings(
        env=config["FAMAI_ENV"],
        log_level=config["FAMAI_LOG_LEVEL"],
        llm_provider=config["FAMAI_LLM_PROVIDER"].lower(),
        gemini_api_key=config["GEMINI_API_KEY"],
        gemini_model=config["FAMAI_GEMINI_MODEL"],
        ollama_host=config["OLLAMA_HOST"],
        ollama_model=config["FAMAI_OLLAMA_MODEL"],
        aps_client_id=config["APS_CLIENT_ID"],
        aps_client_secret=config["APS_CLIENT_SECRET"],
        aps_da_endpoint=config["APS_DA_ENDPOINT"],
        aps_da_activity=config["APS_DA_ACTIVITY"],
        aps_template_url=config["APS_TEMPLATE_URL"],
        simulated_job_seconds=job_seconds,
    )


def configure_logging(level: str | None = None) -> None:
    """Apply a basic logging configuration for scripts and services."""
    level_name = (level or load_config()["FAMAI_LOG_LEVEL"]).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
