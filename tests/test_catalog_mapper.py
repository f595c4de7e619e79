"""Tests for mappers/catalog_mapper.py."""

from __future__ import annotations

import copy
from datetime import date, datetime

import pytest
import yaml

from gemara2oscal.mappers import CatalogMapper, DateParseError, to_catalog
from gemara2oscal.mappers.extensions import TRESTLE_NAMESPACE


@pytest.fixture
def mapper(uuid_factory, clock):
    return CatalogMapper(uuid_factory=uuid_factory, clock=clock)


def controls_by_id(group):
    return {control["id"]: control for control in group.get("controls", [])}


class TestMetadata:
    def test_dates_and_version(self, mapper, guidance):
        metadata = mapper.map(guidance)["catalog"]["metadata"]
        assert metadata["title"] == "Example Guidance"
        assert metadata["version"] == "1.0"
        assert metadata["published"] == "2024-01-15T00:00:00+00:00"
        assert metadata["last-modified"] == "2024-02-01T08:00:00+00:00"
        assert metadata["oscal-version"] == "1.1.3"

    def test_single_author(self, mapper, guidance):
        metadata = mapper.map(guidance)["catalog"]["metadata"]
        assert metadata["roles"] == [
            {"id": "author", "title": "Author", "description": "Author of the guidance document"}
        ]
        assert len(metadata["parties"]) == 1
        party = metadata["parties"][0]
        assert party["name"] == "Example Author"
        assert party["type"] == "person"
        assert metadata["responsible-parties"] == [
            {"role-id": "author", "party-uuids": [party["uuid"]]}
        ]

    def test_yaml_native_dates(self, mapper, guidance):
        guidance["metadata"]["publication-date"] = date(2024, 1, 15)
        metadata = mapper.map(guidance)["catalog"]["metadata"]
        assert metadata["published"] == "2024-01-15T00:00:00+00:00"

    def test_yaml_native_last_modified(self, mapper, guidance):
        guidance["metadata"]["last-modified"] = yaml.safe_load("last-modified: 2024-02-01 08:00:00")["last-modified"]
        metadata = mapper.map(guidance)["catalog"]["metadata"]
        assert metadata["last-modified"] == "2024-02-01T08:00:00+00:00"

    def test_unquoted_date_only_last_modified(self, mapper, guidance):
        guidance["metadata"]["last-modified"] = yaml.safe_load("last-modified: 2024-02-01")["last-modified"]
        assert isinstance(guidance["metadata"]["last-modified"], date)
        with pytest.raises(DateParseError) as exc_info:
            mapper.map(guidance)
        assert exc_info.value.field == "last-modified"

    def test_timestamp_publication_date(self, mapper, guidance):
        guidance["metadata"]["publication-date"] = datetime(2024, 1, 15, 9, 30)
        with pytest.raises(DateParseError) as exc_info:
            mapper.map(guidance)
        assert exc_info.value.field == "publication-date"

    def test_bad_publication_date(self, mapper, guidance):
        guidance["metadata"]["publication-date"] = "15/01/2024"
        with pytest.raises(DateParseError) as exc_info:
            mapper.map(guidance)
        assert exc_info.value.field == "publication-date"

    def test_bad_last_modified(self, mapper, guidance):
        # date-only is not accepted for the full timestamp
        guidance["metadata"]["last-modified"] = "2024-02-01"
        with pytest.raises(DateParseError):
            mapper.map(guidance)

    def test_missing_date(self, mapper, guidance):
        del guidance["metadata"]["publication-date"]
        with pytest.raises(ValueError):
            mapper.map(guidance)


class TestBackMatter:
    def test_citation_and_source_id(self, mapper, guidance):
        resources = mapper.map(guidance)["catalog"]["back-matter"]["resources"]
        assert len(resources) == 1
        resource = resources[0]
        assert resource["citation"]["text"] == (
            "NIST. (2020). *Reference One*. https://example.com/ref-1"
        )
        assert resource["props"] == [{"name": "id", "value": "REF-1", "ns": TRESTLE_NAMESPACE}]
        assert resource["rlinks"] == [{"href": "https://example.com/ref-1"}]
        assert resource["uuid"] != "REF-1"

    def test_omitted_without_resources(self, mapper, guidance):
        guidance["metadata"]["resources"] = []
        assert "back-matter" not in mapper.map(guidance)["catalog"]


class TestControls:
    def test_group_mirrors_category(self, mapper, guidance):
        groups = mapper.map(guidance)["catalog"]["groups"]
        assert len(groups) == 1
        assert groups[0]["id"] == "CAT"
        assert groups[0]["title"] == "Category"
        assert set(controls_by_id(groups[0])) == {"G-1", "G-2"}

    def test_parts(self, mapper, guidance):
        group = mapper.map(guidance)["catalog"]["groups"][0]
        control = controls_by_id(group)["G-1"]
        objective, statement, guidance_part = control["parts"]

        assert objective == {"id": "G-1_obj", "name": "assessment-objective", "prose": "Do the first thing."}
        assert statement["id"] == "G-1_smt"
        assert statement["name"] == "statement"
        assert [part["id"] for part in statement["parts"]] == ["G-1_smt.a", "G-1_smt.b"]
        assert statement["parts"][0]["parts"] == [
            {"id": "G-1_smt.a_gdn", "name": "guidance", "prose": "Be thorough."}
        ]
        assert "parts" not in statement["parts"][1]
        assert guidance_part == {"id": "G-1_gdn", "name": "guidance", "prose": "Start early. Finish late."}

    def test_no_guidance_without_recommendations(self, mapper, guidance):
        group = mapper.map(guidance)["catalog"]["groups"][0]
        control = controls_by_id(group)["G-2"]
        assert [part["name"] for part in control["parts"]] == ["assessment-objective", "statement"]
        assert "parts" not in control["parts"][1]

    def test_links(self, mapper, guidance):
        catalog = mapper.map(guidance)["catalog"]
        resource_uuid = catalog["back-matter"]["resources"][0]["uuid"]
        control = controls_by_id(catalog["groups"][0])["G-1"]
        assert control["links"] == [
            {"href": "#G-2", "rel": "related"},
            {"href": f"#{resource_uuid}", "rel": "reference"},
        ]

    def test_no_links(self, mapper, guidance):
        group = mapper.map(guidance)["catalog"]["groups"][0]
        assert "links" not in controls_by_id(group)["G-2"]


class TestNesting:
    def add_child(self, guidance, child_id="G-1.1", parent_id="G-1", first=False):
        child = {"id": child_id, "title": "Child", "objective": "Child.", "base-guideline-id": parent_id}
        guidelines = guidance["categories"][0]["guidelines"]
        if first:
            guidelines.insert(0, child)
        else:
            guidelines.append(child)
        return guidance

    def test_child_nested_under_parent(self, mapper, guidance):
        group = mapper.map(self.add_child(guidance))["catalog"]["groups"][0]
        controls = controls_by_id(group)
        assert set(controls) == {"G-1", "G-2"}
        assert [child["id"] for child in controls["G-1"]["controls"]] == ["G-1.1"]

    def test_child_before_parent(self, mapper, guidance):
        group = mapper.map(self.add_child(guidance, first=True))["catalog"]["groups"][0]
        controls = controls_by_id(group)
        assert set(controls) == {"G-1", "G-2"}
        assert [child["id"] for child in controls["G-1"]["controls"]] == ["G-1.1"]
        # the nested parent keeps its own content
        assert controls["G-1"]["title"] == "Guideline One"

    def test_grandchild(self, mapper, guidance):
        self.add_child(guidance, "G-1.1.1", "G-1.1", first=True)
        self.add_child(guidance)
        group = mapper.map(guidance)["catalog"]["groups"][0]
        child = controls_by_id(group)["G-1"]["controls"][0]
        assert [grandchild["id"] for grandchild in child["controls"]] == ["G-1.1.1"]

    def test_parent_in_other_category(self, mapper, guidance):
        guidance["categories"].append({
            "id": "OTHER",
            "title": "Other",
            "guidelines": [{"id": "O-1", "title": "Orphan", "objective": "x", "base-guideline-id": "G-1"}],
        })
        groups = mapper.map(guidance)["catalog"]["groups"]
        assert set(controls_by_id(groups[1])) == {"O-1"}
        assert "controls" not in controls_by_id(groups[0])["G-1"]

    def test_duplicate_guideline_keeps_last(self, mapper, guidance, caplog):
        guidance["categories"][0]["guidelines"].append(
            {"id": "G-2", "title": "Guideline Two Again", "objective": "Again."}
        )
        with caplog.at_level("WARNING"):
            group = mapper.map(guidance)["catalog"]["groups"][0]
        assert [control["id"] for control in group["controls"]] == ["G-1", "G-2"]
        assert controls_by_id(group)["G-2"]["title"] == "Guideline Two Again"
        assert "Duplicate guideline G-2" in caplog.text

    def test_cycle_kept_top_level(self, mapper, guidance):
        guidelines = guidance["categories"][0]["guidelines"]
        guidelines[0]["base-guideline-id"] = "G-2"
        guidelines[1]["base-guideline-id"] = "G-1"
        group = mapper.map(guidance)["catalog"]["groups"][0]
        assert set(controls_by_id(group)) == {"G-1", "G-2"}


def test_input_not_mutated(guidance, uuid_factory):
    original = copy.deepcopy(guidance)
    to_catalog(guidance, uuid_factory=uuid_factory)
    assert guidance == original


def test_empty_category_has_no_controls(mapper):
    guidance = {
        "metadata": {"title": "Empty", "publication-date": "2024-01-01", "last-modified": "2024-01-01 00:00:00"},
        "categories": [{"id": "E", "title": "Empty"}],
    }
    catalog = mapper.map(guidance)["catalog"]
    assert catalog["groups"] == [{"id": "E", "title": "Empty"}]
