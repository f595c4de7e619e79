"""
Control identifier normalization
"""

import re

_SUB_PART_PATTERN = re.compile(r'\((\d+)\)')


def normalize_control_id(control_id: str) -> str:
    """Rewrite parenthesized sub-parts as dotted suffixes and lowercase: AC-2(1) -> ac-2.1"""
    return _SUB_PART_PATTERN.sub(r'.\1', control_id).lower()
