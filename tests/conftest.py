"""Shared fixtures for gemara2oscal tests."""

from __future__ import annotations

import itertools
from datetime import datetime, timezone
from pathlib import Path

import pytest

TESTDATA = Path(__file__).parent / "testdata"

FIXED_TIME = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def testdata() -> Path:
    return TESTDATA


@pytest.fixture
def uuid_factory():
    """Deterministic identifier generator: uuid-0, uuid-1, ..."""
    counter = itertools.count()
    return lambda: f"uuid-{next(counter)}"


@pytest.fixture
def clock():
    return lambda: FIXED_TIME


@pytest.fixture
def guidance() -> dict:
    return {
        "metadata": {
            "id": "GUIDE",
            "title": "Example Guidance",
            "author": "Example Author",
            "version": "1.0",
            "publication-date": "2024-01-15",
            "last-modified": "2024-02-01 08:00:00",
            "resources": [
                {
                    "id": "REF-1",
                    "title": "Reference One",
                    "description": "First reference",
                    "issuing-body": "NIST",
                    "publication-date": "2020",
                    "url": "https://example.com/ref-1",
                }
            ],
        },
        "categories": [
            {
                "id": "CAT",
                "title": "Category",
                "guidelines": [
                    {
                        "id": "G-1",
                        "title": "Guideline One",
                        "objective": "Do the first thing.",
                        "recommendations": ["Start early.", "Finish late."],
                        "see-also": ["G-2"],
                        "external-references": ["REF-1", "MISSING"],
                        "guideline-parts": [
                            {
                                "id": "a",
                                "title": "Part A",
                                "prose": "Part A prose.",
                                "recommendations": ["Be", "thorough."],
                            },
                            {"id": "b", "prose": "Part B prose."},
                        ],
                    },
                    {
                        "id": "G-2",
                        "title": "Guideline Two",
                        "objective": "Do the second thing.",
                    },
                ],
            }
        ],
    }


def make_requirement(requirement_id: str, identifiers=None, reference_id="800-161", parameters=None) -> dict:
    requirement = {"id": requirement_id, "text": f"Text for {requirement_id}"}
    if identifiers is not None:
        requirement["guideline-mappings"] = [{"reference-id": reference_id, "identifiers": identifiers}]
    if parameters is not None:
        requirement["recommended-parameters"] = parameters
    return requirement


def make_catalog(requirements, catalog_id="OSPS-B", mapping_references=None) -> dict:
    if mapping_references is None:
        mapping_references = [
            {"id": "800-161", "description": "Supply chain practices", "url": "https://example.com/800-161"}
        ]
    return {
        "metadata": {"id": catalog_id, "title": "Catalog", "mapping-references": mapping_references},
        "control-families": [
            {
                "id": "FAM",
                "controls": [{"id": "CTRL-1", "assessment-requirements": requirements}],
            }
        ],
    }


@pytest.fixture
def evaluations() -> list:
    return [
        {
            "control-id": "OSPS-QA-07",
            "assessments": [
                {
                    "requirement-id": "OSPS-QA-07.01",
                    "description": "Approvals are required",
                    "message": "Failure information",
                    "result": "Failed",
                    "steps-executed": 3,
                    "methods": [{"name": "my-check-id", "description": "My method"}],
                }
            ],
        }
    ]


def make_plan(activity_title="OSPS-QA-07.01", control_ids=("PL-8",)) -> dict:
    include_controls = [{"control-id": control_id} for control_id in control_ids]
    return {
        "uuid": "plan-uuid",
        "local-definitions": {
            "activities": [
                {
                    "uuid": "example-uuid",
                    "title": activity_title,
                    "steps": [{"title": "my-check-id"}],
                    "related-controls": {"control-selections": [{"include-controls": include_controls}]},
                }
            ]
        },
        "tasks": [{"associated-activities": [{"activity-uuid": "example-uuid"}]}],
        "reviewed-controls": {"control-selections": [{"include-controls": include_controls}]},
    }


@pytest.fixture
def plan() -> dict:
    return make_plan()
