"""Tests for readers/."""

from __future__ import annotations

import json

import pytest

from gemara2oscal.readers import (
    AssessmentPlanReader,
    CatalogReader,
    EvaluationReader,
    GuidanceReader,
    ParameterModifierReader,
)


class TestBaseReader:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            GuidanceReader(tmp_path / "missing.yaml")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "guidance.txt"
        path.write_text("metadata: {}\n", encoding="utf-8")
        with pytest.raises(ValueError):
            GuidanceReader(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ValueError):
            GuidanceReader(path).read()

    def test_file_hash(self, testdata):
        reader = GuidanceReader(testdata / "guidance.yaml")
        assert len(reader.file_hash) == 64

    def test_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"metadata": {"id": "X"}, "control-families": []}), encoding="utf-8")
        assert CatalogReader(path).read()["metadata"]["id"] == "X"


class TestGemaraReaders:
    def test_guidance(self, testdata):
        guidance = GuidanceReader(testdata / "guidance.yaml").read()
        assert guidance["metadata"]["title"] == "Cybersecurity Supply Chain Risk Management Practices"
        assert len(guidance["categories"][0]["guidelines"]) == 3

    def test_guidance_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            GuidanceReader(path).read()

    def test_catalog(self, testdata):
        catalog = CatalogReader(testdata / "catalog.yaml").read()
        assert catalog["metadata"]["mapping-references"][0]["id"] == "800-161"

    def test_evaluations_list(self, testdata):
        evaluations = EvaluationReader(testdata / "evaluations.yaml").read()
        assert evaluations[0]["control-id"] == "OSPS-QA-07"

    def test_evaluations_mapping(self, tmp_path):
        path = tmp_path / "evaluations.yaml"
        path.write_text("evaluations:\n  - control-id: C\n    assessments: []\n", encoding="utf-8")
        assert EvaluationReader(path).read() == [{"control-id": "C", "assessments": []}]

    def test_evaluations_bad_shape(self, tmp_path):
        path = tmp_path / "evaluations.yaml"
        path.write_text("just a string\n", encoding="utf-8")
        with pytest.raises(ValueError):
            EvaluationReader(path).read()

    def test_parameter_modifiers(self, testdata):
        modifiers = ParameterModifierReader(testdata / "modifiers.yaml").read()
        assert modifiers["reference-id"] == "OSPS-B"
        assert modifiers["parameter-modifiers"][0]["value"] == 2

    def test_parameter_modifiers_default_list(self, tmp_path):
        path = tmp_path / "modifiers.yaml"
        path.write_text("reference-id: X\n", encoding="utf-8")
        assert ParameterModifierReader(path).read()["parameter-modifiers"] == []

    def test_parameter_modifiers_require_reference(self, tmp_path):
        path = tmp_path / "modifiers.yaml"
        path.write_text("parameter-modifiers: []\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ParameterModifierReader(path).read()


class TestAssessmentPlanReader:
    def test_unwraps_root(self, testdata):
        plan = AssessmentPlanReader(testdata / "plan.json").read()
        assert plan["local-definitions"]["activities"][0]["title"] == "OSPS-QA-07.01"

    def test_unwrapped_input(self, tmp_path):
        path = tmp_path / "plan.yaml"
        path.write_text("uuid: x\nlocal-definitions:\n  activities: []\n", encoding="utf-8")
        assert AssessmentPlanReader(path).read()["uuid"] == "x"
