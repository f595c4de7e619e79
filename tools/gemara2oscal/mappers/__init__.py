"""
OSCAL mappers for gemara2oscal

Mappers convert Gemara documents to OSCAL v1.1.3 JSON artifacts: guidance
documents to Catalogs, control catalogs and evaluations to Component
Definitions, and control evaluations to Assessment Results.
"""

from .base_mapper import BaseMapper
from .catalog_mapper import CatalogMapper, to_catalog
from .component_builder import ComponentDefinitionBuilder
from .exceptions import ConversionError, DateParseError, ShapeError
from .identifiers import normalize_control_id
from .plan_transformer import PlanTransformer, plan_to_results
from .results_mapper import AssessmentResultsMapper, to_assessment_results

__all__ = [
    'BaseMapper',
    'CatalogMapper',
    'ComponentDefinitionBuilder',
    'AssessmentResultsMapper',
    'PlanTransformer',
    'ConversionError',
    'DateParseError',
    'ShapeError',
    'normalize_control_id',
    'to_catalog',
    'to_assessment_results',
    'plan_to_results'
]
