"""
Assessment plan transformer

Creates the Assessment Results shell for an OSCAL Assessment Plan: metadata,
the import-ap reference and a single result carrying the plan's reviewed
controls and the supplied observations.
"""

import copy
import logging
from typing import Any, Dict, List

from .base_mapper import BaseMapper, format_timestamp

logger = logging.getLogger(__name__)


class PlanTransformer(BaseMapper):
    """Transformer from OSCAL Assessment Plan to Assessment Results"""

    def map(self, plan: Dict[str, Any], plan_href: str,
            observations: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Merge an assessment plan and observations into an unwrapped Assessment Results document"""
        self.timestamp = format_timestamp(self.clock())
        plan = plan.get("assessment-plan", plan)
        logger.debug(f"Building assessment results shell with {len(observations)} observations")

        reviewed_controls = copy.deepcopy(plan.get("reviewed-controls")) or {
            "control-selections": [{"include-all": {}}]
        }

        result = {
            "uuid": self.generate_uuid(),
            "title": "Automated Assessment Result",
            "description": "Assessment results automatically generated from Gemara control evaluations",
            "start": self.timestamp,
            "reviewed-controls": reviewed_controls
        }

        if observations:
            result["observations"] = observations

        assessment_results = {
            "uuid": self.generate_uuid(),
            "metadata": self.create_oscal_metadata(title="Automated Assessment Results"),
            "import-ap": {
                "href": plan_href
            },
            "results": [result]
        }

        activities = plan.get("local-definitions", {}).get("activities", [])
        if activities:
            assessment_results["local-definitions"] = {
                "activities": copy.deepcopy(activities)
            }

        return assessment_results


def plan_to_results(plan: Dict[str, Any], plan_href: str,
                    observations: List[Dict[str, Any]], **kwargs) -> Dict[str, Any]:
    """Create the Assessment Results shell for an assessment plan"""
    return PlanTransformer(**kwargs).map(plan, plan_href, observations)
