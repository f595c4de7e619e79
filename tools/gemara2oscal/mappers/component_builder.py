"""
Component definition builder

Accumulates target components (from Gemara layer 2 control catalogs) and
validation components (from Gemara layer 4 evaluations) into a single OSCAL
v1.1.3 Component Definition.

Rules and checks are encoded as numbered "rule sets": groups of trestle
extension properties sharing a rule_set_<n> remark. Rules are linked to
controls through control implementation sets, one per mapping reference
declared in the catalog metadata.
"""

import copy
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .base_mapper import BaseMapper, stringify_value
from .extensions import (
    CHECK_DESCRIPTION_PROP,
    CHECK_ID_PROP,
    FRAMEWORK_PROP,
    PARAMETER_DEFAULT_PROP,
    PARAMETER_DESCRIPTION_PROP,
    PARAMETER_ID_PROP,
    RULE_DESCRIPTION_PROP,
    RULE_ID_PROP,
)
from .identifiers import normalize_control_id

logger = logging.getLogger(__name__)

VALIDATION_COMPONENT_TYPE = "validation"


def escape_newlines(text: str) -> str:
    """Escape newlines so multi-line text fits in a single property value"""
    return text.replace("\n", "\\n")


class ComponentDefinitionBuilder(BaseMapper):
    """Builder for OSCAL Component Definitions from Gemara inputs

    Target components are tracked by the metadata id of the catalog they were
    built from, so parameter modifiers can be applied to them later. Adding a
    second target component for the same catalog id replaces the first.
    """

    def __init__(self, title: str, version: str,
                 uuid_factory: Optional[Callable[[], str]] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        super().__init__(uuid_factory, clock)
        self.title = title
        self.version = version
        self.target_components: Dict[str, Dict[str, Any]] = {}
        self.validation_components: List[Dict[str, Any]] = []

    def add_target_component(self, name: str, component_type: str,
                             catalog: Dict[str, Any]) -> "ComponentDefinitionBuilder":
        """Add a component implementing the controls mapped from a Gemara catalog"""
        catalog_metadata = catalog.get("metadata", {})
        catalog_id = catalog_metadata.get("id", "")
        logger.info(f"Adding target component '{name}' from catalog {catalog_id}")

        mapping_sets = self._init_mapping_sets(catalog_metadata.get("mapping-references", []))
        # mapping reference id -> normalized control id -> implemented requirement
        implemented_by_set: Dict[str, Dict[str, Dict[str, Any]]] = {
            reference_id: {} for reference_id in mapping_sets
        }

        component_props = []
        group_number = 0

        for family in catalog.get("control-families", []):
            for control in family.get("controls", []):
                for requirement in control.get("assessment-requirements", []):
                    component_props.extend(self._make_rule(requirement, group_number))
                    group_number += 1

                    mappings = requirement.get("guideline-mappings") or control.get("guideline-mappings", [])
                    self._map_rule(requirement.get("id", ""), mappings, mapping_sets, implemented_by_set)

        component = {
            "uuid": self.generate_uuid(),
            "type": component_type,
            "title": name,
            "description": catalog_metadata.get("description") or f"{name} implementing {catalog_id}"
        }

        if component_props:
            component["props"] = component_props

        for control_implementation in mapping_sets.values():
            if not control_implementation["implemented-requirements"]:
                del control_implementation["implemented-requirements"]

        if mapping_sets:
            component["control-implementations"] = list(mapping_sets.values())

        if catalog_id in self.target_components:
            logger.warning(f"Replacing existing target component for catalog {catalog_id}")
        self.target_components[catalog_id] = component
        return self

    def add_validation_component(self, name: str,
                                 evaluations: List[Dict[str, Any]]) -> "ComponentDefinitionBuilder":
        """Add a component describing the checks that validate assessment requirements"""
        logger.info(f"Adding validation component '{name}' from {len(evaluations)} evaluations")

        component_props = []
        group_number = 0

        for evaluation in evaluations:
            for assessment in evaluation.get("assessments", []):
                for method in assessment.get("methods", []):
                    component_props.extend(
                        self._make_check(assessment.get("requirement-id", ""), method, group_number)
                    )
                    group_number += 1

        component = {
            "uuid": self.generate_uuid(),
            "type": VALIDATION_COMPONENT_TYPE,
            "title": name,
            "description": f"Validation checks provided by {name}"
        }

        if component_props:
            component["props"] = component_props

        self.validation_components.append(component)
        return self

    def add_parameter_modifiers(self, reference_id: str,
                                modifiers: List[Dict[str, Any]]) -> "ComponentDefinitionBuilder":
        """Set parameters on every control implementation of the component built from reference_id"""
        component = self.target_components.get(reference_id)
        if component is None:
            logger.debug(f"No target component for {reference_id}; skipping parameter modifiers")
            return self

        for modifier in modifiers:
            value = stringify_value(modifier.get("value"))
            if value is None:
                logger.debug(f"Parameter modifier for {modifier.get('target-id')} has no value")
                continue

            for control_implementation in component.get("control-implementations", []):
                control_implementation.setdefault("set-parameters", []).append({
                    "param-id": modifier.get("target-id", ""),
                    "values": [value]
                })

        return self

    def build(self) -> Dict[str, Any]:
        """Build the component definition from all accumulated components"""
        components = list(self.target_components.values()) + self.validation_components

        component_definition = {
            "uuid": self.generate_uuid(),
            "metadata": self.create_oscal_metadata(title=self.title, version=self.version)
        }

        if components:
            component_definition["components"] = copy.deepcopy(components)

        return {"component-definition": component_definition}

    def map(self) -> Dict[str, Any]:
        """Alias for build()"""
        return self.build()

    def _init_mapping_sets(self, mapping_refs: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """Create one control implementation set per catalog mapping reference"""
        mapping_sets = {}

        for mapping_ref in mapping_refs:
            reference_id = mapping_ref.get("id", "")
            mapping_sets[reference_id] = {
                "uuid": self.generate_uuid(),
                "source": mapping_ref.get("url", ""),
                "description": mapping_ref.get("description", ""),
                "props": [self.create_trestle_property(FRAMEWORK_PROP, reference_id)],
                "implemented-requirements": []
            }

        return mapping_sets

    def _make_rule(self, requirement: Dict[str, Any], group_number: int) -> List[Dict[str, Any]]:
        """Create the rule set for one assessment requirement"""
        remark = f"rule_set_{group_number}"

        props = [
            self.create_trestle_property(RULE_ID_PROP, requirement.get("id", ""), remark),
            self.create_trestle_property(
                RULE_DESCRIPTION_PROP, escape_newlines(requirement.get("text") or ""), remark
            )
        ]

        for i, parameter in enumerate(requirement.get("recommended-parameters", [])):
            props.append(
                self.create_trestle_property(f"{PARAMETER_ID_PROP}_{i}", parameter.get("id", ""), remark)
            )
            props.append(
                self.create_trestle_property(
                    f"{PARAMETER_DESCRIPTION_PROP}_{i}",
                    escape_newlines(parameter.get("description") or ""),
                    remark
                )
            )

            default = stringify_value(parameter.get("default"))
            if default is not None:
                props.append(
                    self.create_trestle_property(f"{PARAMETER_DEFAULT_PROP}_{i}", default, remark)
                )

        return props

    def _make_check(self, rule_id: str, method: Dict[str, Any], group_number: int) -> List[Dict[str, Any]]:
        """Create the rule set linking a rule to one of its checks"""
        remark = f"rule_set_{group_number}"

        return [
            self.create_trestle_property(RULE_ID_PROP, rule_id, remark),
            self.create_trestle_property(CHECK_ID_PROP, method.get("name", ""), remark),
            self.create_trestle_property(CHECK_DESCRIPTION_PROP, method.get("description", ""), remark)
        ]

    def _map_rule(self, rule_id: str, mappings: List[Dict[str, Any]],
                  mapping_sets: Dict[str, Dict[str, Any]],
                  implemented_by_set: Dict[str, Dict[str, Dict[str, Any]]]) -> None:
        """Record rule_id on the implemented requirement of every control it maps to"""
        for mapping in mappings:
            reference_id = mapping.get("reference-id", "")
            control_implementation = mapping_sets.get(reference_id)
            if control_implementation is None:
                logger.debug(f"Rule {rule_id} maps to undeclared reference {reference_id}; dropping")
                continue

            implemented = implemented_by_set[reference_id]
            for identifier in mapping.get("identifiers", []):
                control_id = normalize_control_id(identifier)
                rule_prop = self.create_trestle_property(RULE_ID_PROP, rule_id)

                requirement = implemented.get(control_id)
                if requirement is None:
                    requirement = {
                        "uuid": self.generate_uuid(),
                        "control-id": control_id,
                        "description": f"Rules implementing {control_id}",
                        "props": [rule_prop]
                    }
                    implemented[control_id] = requirement
                    control_implementation["implemented-requirements"].append(requirement)
                else:
                    requirement["props"].append(rule_prop)
