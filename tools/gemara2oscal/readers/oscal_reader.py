"""
Reader for OSCAL assessment plans
"""

import logging
from typing import Any, Dict

from .base_reader import BaseReader

logger = logging.getLogger(__name__)


class AssessmentPlanReader(BaseReader):
    """Reader for OSCAL Assessment Plans in JSON or YAML"""

    def read(self) -> Dict[str, Any]:
        """Return the unwrapped assessment-plan object"""
        content = self._load()
        if not isinstance(content, dict):
            raise ValueError(f"Expected an OSCAL assessment plan in {self.file_path}")

        plan = content.get("assessment-plan", content)
        activities = plan.get("local-definitions", {}).get("activities", [])
        logger.info(f"Read assessment plan with {len(activities)} activities from {self.file_path}")
        return plan
