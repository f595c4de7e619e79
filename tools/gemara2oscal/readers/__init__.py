"""
Document readers for gemara2oscal

Readers load Gemara documents and OSCAL assessment plans from YAML or JSON
into the plain dictionaries the mappers consume.
"""

from .base_reader import BaseReader
from .gemara_reader import CatalogReader, EvaluationReader, GuidanceReader, ParameterModifierReader
from .oscal_reader import AssessmentPlanReader

__all__ = [
    'BaseReader',
    'GuidanceReader',
    'CatalogReader',
    'EvaluationReader',
    'ParameterModifierReader',
    'AssessmentPlanReader'
]
