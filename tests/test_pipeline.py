"""End-to-end tests for FamilyPipeline: prompt -> design -> QA -> job -> artifact."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from famai import DesignResult, FamilyPipeline, JobStatus
from famai.config import load_settings
from famai.errors import ArtifactRetrievalError, NotReadyError, SessionNotFoundError
from famai.nlp.providers.base import LLMProvider
from famai.store import InMemoryStore
from tests.conftest import WINDOW_PROMPT


@pytest.fixture
def pipeline(clock) -> FamilyPipeline:
    return FamilyPipeline(clock=clock)


def _broken_geometry_provider(sir_dict) -> MagicMock:
    sir_dict["geometryDefinition"]["extrusions"][0]["profile"] = [{"x": 0, "y": 0}, {"x": 1, "y": 0}]
    provider = MagicMock(spec=LLMProvider)
    provider.is_available.return_value = True
    provider.complete.return_value = json.dumps(sir_dict)
    return provider


class TestDesign:
    def test_create_offline(self, pipeline: FamilyPipeline) -> None:
        design = pipeline.create(WINDOW_PROMPT, "s1")
        assert isinstance(design, DesignResult)
        assert design.ready
        assert design.version == 1
        assert design.code is not None
        assert "Generated Window" in design.code.code

        session = pipeline.session("s1")
        assert session.code == design.code
        assert session.last_qa.overall_pass

    def test_refine_bumps_version(self, pipeline: FamilyPipeline) -> None:
        pipeline.create(WINDOW_PROMPT, "s1")
        design = pipeline.refine("s1", "make it 1500 mm wide")
        assert design.version == 2
        assert pipeline.session("s1").version == 2
        assert design.generation.sir.parameter("Width").default_value == pytest.approx(1500 / 304.8)

    def test_variations_leave_design_alone(self, pipeline: FamilyPipeline) -> None:
        base = pipeline.create(WINDOW_PROMPT, "s1")
        variations = pipeline.variations("s1")
        assert len(variations) == 3
        assert all(v.code is not None for v in variations)
        session = pipeline.session("s1")
        assert session.version == 1
        assert session.code == base.code

    def test_unknown_session(self, pipeline: FamilyPipeline) -> None:
        with pytest.raises(SessionNotFoundError):
            pipeline.session("missing")
        with pytest.raises(SessionNotFoundError):
            pipeline.execute("missing")
        with pytest.raises(SessionNotFoundError):
            pipeline.variations("missing")

    def test_failed_qa_is_reported(self, sir_dict, clock) -> None:
        pipeline = FamilyPipeline(_broken_geometry_provider(sir_dict), clock=clock)
        design = pipeline.create("a door", "s1")
        assert not design.ready
        assert not design.qa.validations["geometry"].passed
        assert design.qa.recommendations

    def test_shared_session_store(self, clock) -> None:
        sessions = InMemoryStore()
        FamilyPipeline(sessions=sessions, clock=clock).create("door", "s1")
        assert sessions.get("s1").last_qa is not None


class TestExecution:
    def test_full_flow(self, pipeline: FamilyPipeline, clock) -> None:
        pipeline.create(WINDOW_PROMPT, "s1")
        record = pipeline.execute("s1")
        assert record.simulated
        assert record.params["FileName"] == "Generated Window.rfa"
        assert pipeline.session("s1").job_ids == [record.job_id]

        with pytest.raises(ArtifactRetrievalError):
            pipeline.download(record.job_id)

        clock.advance(4)
        assert pipeline.status(record.job_id).status is JobStatus.INPROGRESS
        clock.advance(12)
        report = pipeline.status(record.job_id)
        assert report.status is JobStatus.SUCCESS
        assert report.progress == 100.0

        data = pipeline.download(record.job_id)
        assert data.startswith(b"RFA File")
        assert b"Generated Window.rfa" in data
        assert [r.job_id for r in pipeline.jobs("s1")] == [record.job_id]

    def test_cancel(self, pipeline: FamilyPipeline) -> None:
        pipeline.create(WINDOW_PROMPT, "s1")
        job_id = pipeline.execute("s1").job_id
        assert pipeline.cancel(job_id).status is JobStatus.CANCELLED

    def test_refuses_unvalidated_design(self, sir_dict, clock) -> None:
        pipeline = FamilyPipeline(_broken_geometry_provider(sir_dict), clock=clock)
        pipeline.create("a door", "s1")
        with pytest.raises(NotReadyError):
            pipeline.execute("s1")
        assert pipeline.jobs("s1") == []

    def test_simulated_duration(self, clock) -> None:
        pipeline = FamilyPipeline(clock=clock, simulated_job_seconds=60)
        pipeline.create(WINDOW_PROMPT, "s1")
        job_id = pipeline.execute("s1").job_id
        clock.advance(30)
        assert pipeline.status(job_id).status is JobStatus.INPROGRESS
        clock.advance(30)
        assert pipeline.status(job_id).status is JobStatus.SUCCESS


class TestFromSettings:
    def test_testing_profile_is_offline(self) -> None:
        pipeline = FamilyPipeline.from_settings(load_settings({"FAMAI_ENV": "testing"}))
        assert pipeline.generator._provider is None
        assert pipeline.tracker.backend is None

    def test_simulated_seconds_from_environment(self) -> None:
        settings = load_settings({"FAMAI_ENV": "testing", "FAMAI_SIMULATED_JOB_SECONDS": "5"})
        assert FamilyPipeline.from_settings(settings).tracker.simulator.duration == 5.0
