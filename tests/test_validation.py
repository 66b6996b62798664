"""Tests for the QA gateway, its six passes, formulas and reports."""

from __future__ import annotations

import json
from typing import Any

import pytest

from famai.errors import SIRStructureError
from famai.sir.schema import SIR
from famai.validation import QAGateway, QAPass, improvement_score
from famai.validation.formula import formula_problems, references, substitute
from famai.validation.passes import (
    CompliancePass,
    FlexingPass,
    GeometryPass,
    MetadataPass,
    ParametersPass,
    PerformancePass,
)
from famai.validation.passes.parameters import value_problem
from famai.validation.suggestions import suggest
from tests.conftest import sample_sir_dict

PASS_NAMES = ["geometry", "parameters", "performance", "compliance", "flexing", "metadata"]


@pytest.fixture
def gateway() -> QAGateway:
    return QAGateway()


def _sir(mutate=None, **metadata: Any) -> SIR:
    data = sample_sir_dict(**metadata)
    if mutate is not None:
        mutate(data)
    return SIR.from_dict(data)


def _params(data: dict[str, Any]) -> list[dict[str, Any]]:
    return data["parameters"]["familyParameters"]


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------


class TestQAGateway:
    def test_valid_sir_passes(self, gateway: QAGateway, door_sir: SIR) -> None:
        qa = gateway.validate(door_sir)
        assert qa.overall_pass
        assert list(qa.validations) == PASS_NAMES
        assert all(v.passed for v in qa.validations.values())
        assert qa.recommendations == []

    def test_heuristic_window_passes(self, gateway: QAGateway, window_sir: SIR) -> None:
        assert gateway.validate(window_sir).overall_pass

    def test_accepts_wire_dict(self, gateway: QAGateway, sir_dict) -> None:
        assert gateway.validate(sir_dict).family_name == "Test Door"

    def test_schema_mismatch_raises(self, gateway: QAGateway) -> None:
        with pytest.raises(SIRStructureError):
            gateway.validate({"geometryDefinition": {"extrusions": "nope"}})

    def test_critical_passes(self, gateway: QAGateway, door_sir: SIR) -> None:
        critical = {n for n, v in gateway.validate(door_sir).validations.items() if v.critical}
        assert critical == {"geometry", "parameters", "metadata"}

    @pytest.mark.parametrize("failing", ["geometry", "parameters", "metadata"])
    def test_any_critical_failure_fails_overall(self, gateway: QAGateway, failing: str) -> None:
        def mutate(data: dict[str, Any]) -> None:
            if failing == "geometry":
                data["geometryDefinition"]["extrusions"][0]["profile"] = [{"x": 0, "y": 0}, {"x": 1, "y": 0}]
            elif failing == "parameters":
                _params(data).append({"name": "Width", "type": "Length", "defaultValue": 1})
            else:
                data["familyMetadata"]["lodLevel"] = 250

        qa = gateway.validate(_sir(mutate))
        assert not qa.validations[failing].passed
        assert not qa.overall_pass
        assert qa.failed_passes() == [failing]

    def test_advisory_failure_keeps_overall(self, gateway: QAGateway, door_sir: SIR) -> None:
        qa = gateway.validate(door_sir, code="while True:\n    pass\n")
        assert not qa.validations["performance"].passed
        assert qa.overall_pass

    def test_deduction_override(self, door_sir: SIR) -> None:
        gateway = QAGateway(deductions={"metadata.missing_description": 40})
        sir = _sir(description="")
        qa = gateway.validate(sir)
        assert qa.validations["metadata"].score == 60
        assert qa.validations["metadata"].passed

    def test_score_floors_at_zero(self) -> None:
        def mutate(data: dict[str, Any]) -> None:
            data["parameters"]["familyParameters"] = [
                {"name": "1bad", "type": "Weird"} for _ in range(6)
            ]

        qa = QAGateway().validate(_sir(mutate))
        assert qa.validations["parameters"].score == 0

    def test_add_pass_replaces_by_name(self, gateway: QAGateway, door_sir: SIR) -> None:
        def no_doors(sir: SIR) -> list[str]:
            return ["Doors are not allowed here"] if sir.category == "Doors" else []

        gateway.add_pass(CompliancePass({"house_rules": no_doors}))
        qa = gateway.validate(door_sir)
        assert len(gateway.passes) == 6
        assert qa.validations["compliance"].issues == ["Doors are not allowed here"]
        assert qa.overall_pass

    def test_custom_critical_pass(self, gateway: QAGateway, door_sir: SIR) -> None:
        class NameLength(QAPass):
            critical = True

            @property
            def name(self) -> str:
                return "name_length"

            @property
            def description(self) -> str:
                return "Family names must be short."

            def check(self, sir, code, findings) -> None:
                if len(sir.family_name) > 5:
                    findings.issue("name_length.too_long", "Family name too long")

        gateway.add_pass(NameLength())
        assert not gateway.validate(door_sir).overall_pass

    def test_crashing_pass_scores_zero(self, gateway: QAGateway, door_sir: SIR) -> None:
        class Broken(QAPass):
            @property
            def name(self) -> str:
                return "broken"

            @property
            def description(self) -> str:
                return "Always raises."

            def check(self, sir, code, findings) -> None:
                raise ValueError("kaboom")

        gateway.add_pass(Broken())
        result = gateway.validate(door_sir).validations["broken"]
        assert result.score == 0
        assert "kaboom" in result.issues[0]


# ---------------------------------------------------------------------------
# Passes
# ---------------------------------------------------------------------------


class TestGeometryPass:
    def _run(self, sir: SIR):
        return GeometryPass().run(sir, None, {})

    def test_two_point_profile_fails(self) -> None:
        def mutate(data):
            data["geometryDefinition"]["extrusions"][0]["profile"] = [{"x": 0, "y": 0}, {"x": 1, "y": 1}]

        result = self._run(_sir(mutate))
        assert not result.passed
        assert any("invalid profile" in i for i in result.issues)

    def test_no_extrusions(self) -> None:
        result = self._run(_sir(lambda d: d["geometryDefinition"].update(extrusions=[], constraints=[])))
        assert "No extrusions defined in geometry" in result.issues

    def test_zero_height(self) -> None:
        def mutate(data):
            data["geometryDefinition"]["extrusions"][0]["endPoint"]["z"] = 0

        assert any("zero or negative height" in i for i in self._run(_sir(mutate)).issues)

    def test_non_unit_normal(self) -> None:
        def mutate(data):
            data["geometryDefinition"]["referencePlanes"][0]["normal"] = {"x": 1, "y": 1, "z": 0}

        assert any("normal" in i for i in self._run(_sir(mutate)).issues)

    def test_constraint_to_unknown_element(self) -> None:
        def mutate(data):
            data["geometryDefinition"]["constraints"][0]["element2"] = "Ghost"

        assert any("'Ghost'" in i for i in self._run(_sir(mutate)).issues)

    def test_low_lod_many_extrusions_warns(self, door_sir: SIR) -> None:
        def mutate(data):
            extrusions = data["geometryDefinition"]["extrusions"]
            extrusions.extend([dict(extrusions[0], name=f"Extra{i}") for i in range(2)])

        result = self._run(_sir(mutate, lodLevel=200))
        assert result.passed
        assert any("complex geometry" in w for w in result.warnings)

    def test_high_lod_single_extrusion_warns(self) -> None:
        def mutate(data):
            del data["geometryDefinition"]["extrusions"][1]

        result = self._run(_sir(mutate, lodLevel=400))
        assert any("more detailed" in w for w in result.warnings)

    def test_many_profile_points_warn(self) -> None:
        def mutate(data):
            data["geometryDefinition"]["extrusions"][0]["profile"] = [
                {"x": i, "y": i % 2} for i in range(25)
            ]

        result = self._run(_sir(mutate))
        assert any("high complexity" in w for w in result.warnings)


class TestParametersPass:
    def _run(self, sir: SIR):
        return ParametersPass().run(sir, None, {})

    def test_duplicate_names_fail(self) -> None:
        result = self._run(_sir(lambda d: _params(d).append({"name": "Height", "type": "Length"})))
        assert not result.passed
        assert "Duplicate parameter name: Height" in result.issues

    def test_name_pattern(self) -> None:
        result = self._run(_sir(lambda d: _params(d).append({"name": "Frame Width", "type": "Length"})))
        assert any("Invalid parameter name format" in i for i in result.issues)

    def test_type_enumeration(self) -> None:
        result = self._run(_sir(lambda d: _params(d).append({"name": "Area", "type": "Area"})))
        assert "Invalid parameter type: Area" in result.issues

    def test_undefined_formula_reference(self) -> None:
        def mutate(data):
            _params(data)[3]["formula"] = "Width / Panels"

        result = self._run(_sir(mutate))
        assert "Invalid formula for HalfWidth: Undefined parameter reference: Panels" in result.issues

    def test_formula_without_operator(self) -> None:
        def mutate(data):
            _params(data)[3]["formula"] = "Width"

        result = self._run(_sir(mutate))
        assert any("no valid operators" in i for i in result.issues)

    def test_self_referencing_formula(self) -> None:
        def mutate(data):
            _params(data)[3]["formula"] = "HalfWidth * 2"

        result = self._run(_sir(mutate))
        assert any("its own parameter" in i for i in result.issues)

    def test_missing_essential_is_a_warning(self) -> None:
        result = self._run(_sir(lambda d: _params(d).pop(2)))  # Thickness
        assert result.passed
        assert "Missing essential parameter: Thickness" in result.warnings

    def test_essential_names_are_normalised(self, window_sir: SIR) -> None:
        assert self._run(window_sir).warnings == []

    def test_empty_type_name(self) -> None:
        def mutate(data):
            data["parameters"]["familyTypes"][0]["name"] = " "

        assert any("empty name" in i for i in self._run(_sir(mutate)).issues)

    def test_binding_type_mismatch(self) -> None:
        def mutate(data):
            data["parameters"]["familyTypes"][0]["parameters"]["Width"] = "wide"

        result = self._run(_sir(mutate))
        assert "Invalid value for Width in type Standard: Value must be numeric" in result.issues

    def test_no_parameters(self) -> None:
        result = self._run(_sir(lambda d: d["parameters"].update(familyParameters=[])))
        assert "No family parameters defined" in result.issues


class TestValueProblem:
    @pytest.mark.parametrize(
        "value, param_type",
        [(3, "Length"), ("2.5", "Number"), (4.0, "Integer"), (True, "YesNo"), ("yes", "YesNo"),
         ("Oak", "Material"), ("label", "Text")],
    )
    def test_accepted(self, value, param_type) -> None:
        assert value_problem(value, param_type) is None

    @pytest.mark.parametrize(
        "value, param_type",
        [("abc", "Length"), (True, "Number"), (2.5, "Integer"), ("maybe", "YesNo"), (3, "Text")],
    )
    def test_rejected(self, value, param_type) -> None:
        assert value_problem(value, param_type) is not None


class TestPerformancePass:
    def _run(self, sir: SIR, code: str | None = None):
        return PerformancePass().run(sir, code, {})

    def test_unbounded_loop_is_an_issue(self, door_sir: SIR) -> None:
        result = self._run(door_sir, "while True:\n    pass\n")
        assert not result.passed

    def test_code_complexity_warning(self, door_sir: SIR) -> None:
        code = "if x:\n    pass\n" * 30
        result = self._run(door_sir, code)
        assert result.details["code_complexity"] == 60
        assert any("code complexity" in w for w in result.warnings)

    def test_many_parameters_warn(self) -> None:
        def mutate(data):
            _params(data).extend({"name": f"Extra{i}", "type": "Number", "defaultValue": i} for i in range(20))

        assert any("parameter count" in w for w in self._run(_sir(mutate)).warnings)

    def test_low_lod_extrusions_warn(self) -> None:
        def mutate(data):
            extrusions = data["geometryDefinition"]["extrusions"]
            extrusions.append(dict(extrusions[0], name="Extra"))

        assert any("minimal geometry" in w for w in self._run(_sir(mutate, lodLevel=200)).warnings)

    def test_without_code(self, door_sir: SIR) -> None:
        result = self._run(door_sir)
        assert result.passed
        assert "code_complexity" not in result.details
        assert result.details["profile_points"] == 7


class TestCompliancePass:
    def test_placeholder_checks_always_pass(self, door_sir: SIR) -> None:
        result = CompliancePass().run(door_sir, None, {})
        assert result.passed and result.score == 100
        assert result.details["checks"] == ["bim_execution_plan", "industry_standards", "category_rules"]


class TestFlexingPass:
    def test_valid_formulas_flex(self, door_sir: SIR) -> None:
        result = FlexingPass().run(door_sir, None, {})
        assert result.passed
        assert result.details["scenarios"] > 0

    def test_broken_dependent_formula(self) -> None:
        def mutate(data):
            _params(data)[3]["formula"] = "Width / / 2"

        result = FlexingPass().run(_sir(mutate), None, {})
        assert any(i.startswith("Flexing scenario failed: HalfWidth with Width=") for i in result.issues)

    def test_null_constraint_element(self) -> None:
        def mutate(data):
            data["geometryDefinition"]["constraints"][0]["element2"] = None

        result = FlexingPass().run(_sir(mutate), None, {})
        assert "Constraint 0 has missing elements" in result.issues


class TestMetadataPass:
    def _run(self, sir: SIR):
        return MetadataPass().run(sir, None, {})

    def test_invalid_lod(self) -> None:
        assert any("Invalid LOD level: 250" in i for i in self._run(_sir(lodLevel=250)).issues)

    def test_missing_fields(self) -> None:
        result = self._run(_sir(familyName="", lodLevel=None))
        assert "Missing required metadata field: familyName" in result.issues
        assert "Missing required metadata field: lodLevel" in result.issues

    def test_nonstandard_category_is_a_warning(self) -> None:
        result = self._run(_sir(category="Spaceships"))
        assert result.passed
        assert "Non-standard category: Spaceships" in result.warnings

    def test_missing_description(self) -> None:
        assert "Missing family description" in self._run(_sir(description="")).warnings


# ---------------------------------------------------------------------------
# Formulas
# ---------------------------------------------------------------------------


class TestFormula:
    def test_valid(self) -> None:
        assert formula_problems("Width - 2 * Frame", {"Width", "Frame"}) == []

    def test_functions_are_not_references(self) -> None:
        assert references("if(Height > 6, Width, 0)") == {"Height", "Width"}
        assert formula_problems("if(Height > 6, 0.1, 0.05)", {"Height"}) == []

    def test_empty(self) -> None:
        assert formula_problems("  ", set()) == ["Empty formula"]

    def test_unbalanced_parentheses(self) -> None:
        assert "Unbalanced parentheses" in formula_problems("(Width + 1", {"Width"})

    def test_trailing_operator(self) -> None:
        assert "Formula ends with an operator" in formula_problems("Width +", {"Width"})

    def test_unary_minus(self) -> None:
        assert formula_problems("-Width + 1", {"Width"}) == []

    def test_unexpected_character(self) -> None:
        assert "Unexpected character: $" in formula_problems("Width + $", {"Width"})

    def test_substitute_whole_words(self) -> None:
        assert substitute("Width + FrameWidth", "Width", 10) == "10 + FrameWidth"


# ---------------------------------------------------------------------------
# Results and reports
# ---------------------------------------------------------------------------


class TestQAResult:
    def test_recommendations(self, gateway: QAGateway) -> None:
        def mutate(data):
            data["geometryDefinition"]["extrusions"][0]["profile"] = [{"x": 0, "y": 0}, {"x": 1, "y": 0}]

        qa = gateway.validate(_sir(mutate, description=""))
        by_pass = {(r.pass_name, r.priority): r for r in qa.recommendations}
        assert ("geometry", "high") in by_pass
        assert ("metadata", "medium") in by_pass
        assert by_pass[("geometry", "high")].suggestions == [
            "Ensure extrusion profiles have at least 3 points forming a closed loop"
        ]

    def test_suggestion_lookup(self) -> None:
        assert suggest("metadata", "Missing required metadata field: lodLevel") == (
            "Provide familyName, category and lodLevel"
        )
        assert suggest("compliance", "anything") == "Review compliance requirements"

    def test_summary_and_score(self, gateway: QAGateway, door_sir: SIR) -> None:
        qa = gateway.validate(door_sir)
        assert qa.overall_score == 100.0
        assert qa.summary() == "READY: score 100.0/100, 0 issues, 0 warnings"

    def test_markdown(self, gateway: QAGateway) -> None:
        md = gateway.validate(_sir(category="Spaceships")).to_markdown()
        assert md.startswith("# QA Report: Test Door")
        assert "| metadata (critical) | pass |" in md
        assert "**metadata** WARNING: Non-standard category: Spaceships" in md
        assert "## Recommendations" in md

    def test_markdown_clean(self, gateway: QAGateway, door_sir: SIR) -> None:
        assert "No issues found" in gateway.validate(door_sir).to_markdown()

    def test_json_uses_pass_alias(self, gateway: QAGateway, door_sir: SIR) -> None:
        data = json.loads(gateway.validate(door_sir).to_json())
        assert data["validations"]["geometry"]["pass"] is True
        assert data["overall_pass"] is True

    def test_improvement_score(self, gateway: QAGateway, door_sir: SIR) -> None:
        before = gateway.validate(_sir(description=""))
        after = gateway.validate(door_sir)
        assert improvement_score(before, after) > 0
