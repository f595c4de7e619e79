"""
Assessment results mapper

Converts Gemara layer 4 control evaluations into OSCAL v1.1.3 Assessment
Results for a given Assessment Plan. Every assessment becomes an
observation; non-passing observations become findings against the control
statements the plan associates with the assessed requirement.
"""

import logging
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .base_mapper import BaseMapper, format_timestamp
from .exceptions import ShapeError
from .extensions import (
    ASSESSMENT_CHECK_ID_PROP,
    ASSESSMENT_RULE_ID_PROP,
    REASON_PROP,
    RESULT_PROP,
    STEPS_EXECUTED_PROP,
    get_trestle_prop,
)
from .plan_transformer import PlanTransformer

logger = logging.getLogger(__name__)

SUBJECT_TYPE = "resource"
OBSERVATION_METHOD = "TEST-AUTOMATED"
PASSED = "passed"
UNKNOWN = "unknown"

# Compacted Gemara result values -> OSCAL result strings
RESULT_MAPPINGS = {
    "passed": PASSED,
    "failed": "failed",
    "needsreview": "needs-review",
    "notapplicable": "not-applicable",
    "notrun": "not-run",
    "unknown": UNKNOWN
}


def normalize_result(result: Any) -> str:
    """Map a Gemara assessment result to its OSCAL result string"""
    if result is None:
        return UNKNOWN
    compact = re.sub(r'[\s_\-]', '', str(result)).lower()
    return RESULT_MAPPINGS.get(compact, UNKNOWN)


class AssessmentResultsMapper(BaseMapper):
    """Mapper for Gemara control evaluations to OSCAL Assessment Results"""

    def __init__(self, uuid_factory: Optional[Callable[[], str]] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 transformer: Optional[BaseMapper] = None):
        super().__init__(uuid_factory, clock)
        self.transformer = transformer or PlanTransformer(uuid_factory, clock)

    def map(self, plan_href: str, plan: Dict[str, Any],
            evaluations: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Map an assessment plan and its control evaluations to OSCAL Assessment Results"""
        logger.info(f"Mapping {len(evaluations)} control evaluations to OSCAL Assessment Results")

        # The source evaluations carry no timestamps, so observations are collected "now"
        self.timestamp = format_timestamp(self.clock())
        plan = plan.get("assessment-plan", plan)

        rules_by_controls = self._build_control_mapping(plan)

        # Requirement id -> subject UUID, shared across all evaluations
        subject_uuids: Dict[str, str] = {}
        observations = []
        for evaluation in evaluations:
            observations.extend(self._observations_from_evaluation(evaluation, subject_uuids))

        assessment_results = self.transformer.map(plan, plan_href, observations)

        results = assessment_results.get("results", [])
        if len(results) != 1:
            raise ShapeError(
                f"Assessment results should contain exactly one result, found {len(results)}"
            )
        result = results[0]

        findings, resources = self._derive_findings(result.get("observations", []), rules_by_controls)

        if findings:
            result["findings"] = findings

        if resources:
            assessment_results["back-matter"] = {"resources": resources}

        logger.info(f"Generated {len(observations)} observations and {len(findings)} findings")
        return {"assessment-results": assessment_results}

    def _build_control_mapping(self, plan: Dict[str, Any]) -> Dict[str, List[str]]:
        """Map plan activity titles to the control statements they assess"""
        rules_by_controls = {}

        for activity in plan.get("local-definitions", {}).get("activities", []):
            control_set = []
            related_controls = activity.get("related-controls") or {}
            for selection in related_controls.get("control-selections", []):
                for control in selection.get("include-controls", []):
                    control_set.append(f"{control.get('control-id', '')}_smt")
            rules_by_controls[activity.get("title", "")] = control_set

        return rules_by_controls

    def _observations_from_evaluation(self, evaluation: Dict[str, Any],
                                      subject_uuids: Dict[str, str]) -> List[Dict[str, Any]]:
        """Create one observation per assessment in a control evaluation"""
        observations = []

        for assessment in evaluation.get("assessments", []):
            requirement_id = assessment.get("requirement-id", "")
            message = assessment.get("message", "")
            result = normalize_result(assessment.get("result"))

            subject_uuid = subject_uuids.get(requirement_id)
            if subject_uuid is None:
                subject_uuid = self.generate_uuid()
                subject_uuids[requirement_id] = subject_uuid

            subject = {
                "subject-uuid": subject_uuid,
                "type": SUBJECT_TYPE,
                "props": [self.create_trestle_property(RESULT_PROP, result)]
            }
            if message:
                subject["title"] = message

            observation = {
                "uuid": self.generate_uuid(),
                "title": requirement_id,
                "description": assessment.get("description") or requirement_id,
                "methods": [OBSERVATION_METHOD],
                "collected": self.timestamp,
                "subjects": [subject],
                "props": [
                    self.create_trestle_property(ASSESSMENT_RULE_ID_PROP, requirement_id),
                    # Gemara has no separate check id; the requirement id stands in
                    self.create_trestle_property(ASSESSMENT_CHECK_ID_PROP, requirement_id),
                    self.create_trestle_property(RESULT_PROP, result),
                    self.create_trestle_property(REASON_PROP, message),
                    self.create_trestle_property(
                        STEPS_EXECUTED_PROP, str(assessment.get("steps-executed", 0))
                    )
                ]
            }
            observations.append(observation)

        return observations

    def _derive_findings(self, observations: List[Dict[str, Any]],
                         rules_by_controls: Dict[str, List[str]]):
        """Derive per-statement findings and subject resources from observations"""
        findings: Dict[str, Dict[str, Any]] = {}
        resources: Dict[str, Dict[str, Any]] = {}

        for observation in observations:
            props = observation.get("props")
            if not props:
                continue

            rule = get_trestle_prop(ASSESSMENT_RULE_ID_PROP, props)
            if rule is None:
                continue

            targets = rules_by_controls.get(rule["value"])
            if not targets:
                logger.debug(f"No plan activity maps rule {rule['value']} to controls")
                continue

            for subject in observation.get("subjects", []):
                subject_uuid = subject["subject-uuid"]
                if subject_uuid not in resources:
                    resources[subject_uuid] = self.create_back_matter_resource(
                        title=subject.get("title") or observation.get("title", ""),
                        uuid_val=subject_uuid
                    )

                result = get_trestle_prop(RESULT_PROP, subject.get("props"))
                if result is None:
                    continue

                if result["value"] != PASSED:
                    self._generate_findings(findings, observation, targets)
                    break

        return list(findings.values()), list(resources.values())

    def _generate_findings(self, findings: Dict[str, Dict[str, Any]],
                           observation: Dict[str, Any], targets: List[str]) -> None:
        """Create or extend the finding for every target statement of a non-passing observation"""
        related = {"observation-uuid": observation["uuid"]}

        for target_id in targets:
            finding = findings.get(target_id)
            if finding is not None:
                finding["related-observations"].append(dict(related))
                continue

            findings[target_id] = {
                "uuid": self.generate_uuid(),
                "title": f"Finding for {target_id}",
                "description": f"Automated checks for {target_id} did not pass",
                "target": {
                    "type": "statement-id",
                    "target-id": target_id,
                    "status": {
                        "state": "not-satisfied"
                    }
                },
                "related-observations": [dict(related)]
            }


def to_assessment_results(plan_href: str, plan: Dict[str, Any],
                          evaluations: List[Dict[str, Any]], **kwargs) -> Dict[str, Any]:
    """Convert Gemara control evaluations to OSCAL Assessment Results"""
    return AssessmentResultsMapper(**kwargs).map(plan_href, plan, evaluations)
