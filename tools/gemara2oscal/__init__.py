"""
gemara2oscal - Gemara to OSCAL converter

Converts documents from the Gemara layered compliance model into OSCAL
v1.1.3 JSON artifacts.

Key features:
- Layer 1 guidance documents -> OSCAL Catalogs
- Layer 2 control catalogs and layer 4 evaluation methods -> OSCAL Component Definitions
- Layer 3 parameter modifiers -> set-parameters on control implementations
- Layer 4 control evaluations + OSCAL Assessment Plan -> OSCAL Assessment Results

Architecture:
    Inputs (YAML/JSON) -> Readers -> Schema validation -> Mappers -> OSCAL JSON -> oscal-cli
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"

from .mappers import (
    AssessmentResultsMapper,
    CatalogMapper,
    ComponentDefinitionBuilder,
    normalize_control_id,
    to_assessment_results,
    to_catalog,
)

__all__ = [
    'AssessmentResultsMapper',
    'CatalogMapper',
    'ComponentDefinitionBuilder',
    'normalize_control_id',
    'to_assessment_results',
    'to_catalog'
]
