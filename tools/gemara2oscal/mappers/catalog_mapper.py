"""
Catalog mapper

Converts a Gemara layer 1 guidance document to an OSCAL v1.1.3 Catalog.
Categories become groups, guidelines become controls (nested through their
base guideline), and resource references become back-matter citations.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .base_mapper import BaseMapper, format_timestamp
from .exceptions import DateParseError
from .extensions import RESOURCE_ID_PROP

logger = logging.getLogger(__name__)

PUBLICATION_DATE_FORMAT = "%Y-%m-%d"
LAST_MODIFIED_FORMAT = "%Y-%m-%d %H:%M:%S"


class CatalogMapper(BaseMapper):
    """Mapper for Gemara guidance documents to OSCAL Catalog artifacts"""

    AUTHOR_ROLE_ID = "author"

    def map(self, guidance: Dict[str, Any]) -> Dict[str, Any]:
        """Map a guidance document to an OSCAL Catalog"""
        doc_metadata = guidance.get("metadata", {})
        logger.info(f"Mapping guidance document '{doc_metadata.get('title', '')}' to OSCAL Catalog")

        metadata = self._build_metadata(doc_metadata)

        back_matter = self._build_back_matter(doc_metadata.get("resources", []))

        # Source resource id -> generated resource UUID, only needed for linking
        resources_map = {}
        if back_matter:
            for resource in back_matter["resources"]:
                resources_map[resource["props"][0]["value"]] = resource["uuid"]

        groups = [
            self._build_group(category, resources_map)
            for category in guidance.get("categories", [])
        ]

        catalog = {
            "uuid": self.generate_uuid(),
            "metadata": metadata
        }

        if groups:
            catalog["groups"] = groups

        if back_matter:
            catalog["back-matter"] = back_matter

        return {"catalog": catalog}

    def _build_metadata(self, doc_metadata: Dict[str, Any]) -> Dict[str, Any]:
        """Build catalog metadata with a single author party"""
        published = self._parse_date(
            "publication-date", doc_metadata.get("publication-date"), PUBLICATION_DATE_FORMAT, with_time=False
        )
        last_modified = self._parse_date(
            "last-modified", doc_metadata.get("last-modified"), LAST_MODIFIED_FORMAT, with_time=True
        )

        author_role = self.create_role(
            self.AUTHOR_ROLE_ID,
            "Author",
            "Author of the guidance document"
        )
        author = self.create_party(doc_metadata.get("author", ""), party_type="person")

        return self.create_oscal_metadata(
            title=doc_metadata.get("title", ""),
            version=doc_metadata.get("version"),
            published=format_timestamp(published),
            last_modified=format_timestamp(last_modified),
            roles=[author_role],
            parties=[author],
            responsible_parties=[
                {
                    "role-id": author_role["id"],
                    "party-uuids": [author["uuid"]]
                }
            ]
        )

    @staticmethod
    def _parse_date(field: str, value: Any, date_format: str, with_time: bool) -> datetime:
        """Parse a metadata date, accepting values YAML already converted

        A converted value must have the same precision as date_format: a
        datetime for timestamps and a plain date for calendar dates.
        """
        if isinstance(value, date):
            if isinstance(value, datetime) != with_time:
                raise DateParseError(field, value, date_format)
            if with_time:
                return value
            return datetime(value.year, value.month, value.day)

        try:
            return datetime.strptime(str(value), date_format)
        except (TypeError, ValueError):
            raise DateParseError(field, value, date_format) from None

    def _build_back_matter(self, resource_refs: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Build back-matter citations from the document's resource references"""
        resources = []

        for ref in resource_refs:
            citation = (
                f"{ref.get('issuing-body', '')}. ({ref.get('publication-date', '')}). "
                f"*{ref.get('title', '')}*. {ref.get('url', '')}"
            )
            resource = self.create_back_matter_resource(
                title=ref.get("title", ""),
                href=ref.get("url"),
                description=ref.get("description"),
                props=[self.create_trestle_property(RESOURCE_ID_PROP, ref.get("id", ""))],
                citation=citation
            )
            resources.append(resource)

        if not resources:
            return None

        return {"resources": resources}

    def _build_group(self, category: Dict[str, Any], resources_map: Dict[str, str]) -> Dict[str, Any]:
        """Build a control group from a category, nesting guidelines under their base guideline"""
        group = {
            "id": category.get("id", ""),
            "title": category.get("title", "")
        }

        # First pass: every guideline becomes a control
        controls: Dict[str, Dict[str, Any]] = {}
        parents: Dict[str, Optional[str]] = {}
        for guideline in category.get("guidelines", []):
            control = self._guideline_to_control(guideline, resources_map)
            if control["id"] in controls:
                logger.warning(
                    f"Duplicate guideline {control['id']} in category {group['id']}; "
                    f"keeping the last definition"
                )
            controls[control["id"]] = control
            parents[control["id"]] = guideline.get("base-guideline-id") or None

        # Second pass: attach children to parents in this category
        top_level = []
        for control_id, control in controls.items():
            parent_id = parents[control_id]
            if parent_id is None:
                top_level.append(control)
            elif parent_id not in controls:
                logger.warning(
                    f"Base guideline {parent_id} for {control_id} not found in category "
                    f"{group['id']}; keeping {control_id} as a top-level control"
                )
                top_level.append(control)
            elif self._has_cycle(control_id, parents):
                logger.warning(f"Guideline {control_id} is part of a base guideline cycle")
                top_level.append(control)
            else:
                controls[parent_id].setdefault("controls", []).append(control)

        if top_level:
            group["controls"] = top_level

        return group

    @staticmethod
    def _has_cycle(control_id: str, parents: Dict[str, Optional[str]]) -> bool:
        seen = {control_id}
        current = parents.get(control_id)
        while current is not None and current in parents:
            if current in seen:
                return True
            seen.add(current)
            current = parents[current]
        return False

    def _guideline_to_control(self, guideline: Dict[str, Any], resources_map: Dict[str, str]) -> Dict[str, Any]:
        """Convert a single guideline to an OSCAL control"""
        guideline_id = guideline.get("id", "")
        control = {
            "id": guideline_id,
            "title": guideline.get("title", "")
        }

        links = [
            self.create_link(f"#{also}", "related")
            for also in guideline.get("see-also", [])
        ]

        for external in guideline.get("external-references", []):
            resource_uuid = resources_map.get(external)
            if resource_uuid is None:
                logger.debug(f"External reference {external} on {guideline_id} has no resource")
                continue
            links.append(self.create_link(f"#{resource_uuid}", "reference"))

        if links:
            control["links"] = links

        objective_part = {
            "id": f"{guideline_id}_obj",
            "name": "assessment-objective",
            "prose": guideline.get("objective", "")
        }

        statement_part = {
            "id": f"{guideline_id}_smt",
            "name": "statement"
        }

        sub_statements = []
        for part in guideline.get("guideline-parts", []):
            part_id = f"{guideline_id}_smt.{part.get('id', '')}"
            sub_statement = {
                "id": part_id,
                "name": "item",
                "prose": part.get("prose", "")
            }

            if part.get("title"):
                sub_statement["title"] = part["title"]

            recommendations = part.get("recommendations", [])
            if recommendations:
                sub_statement["parts"] = [
                    {
                        "id": f"{part_id}_gdn",
                        "name": "guidance",
                        "prose": " ".join(recommendations)
                    }
                ]

            sub_statements.append(sub_statement)

        if sub_statements:
            statement_part["parts"] = sub_statements

        control["parts"] = [objective_part, statement_part]

        recommendations = guideline.get("recommendations", [])
        if recommendations:
            control["parts"].append({
                "id": f"{guideline_id}_gdn",
                "name": "guidance",
                "prose": " ".join(recommendations)
            })

        return control


def to_catalog(guidance: Dict[str, Any], **kwargs) -> Dict[str, Any]:
    """Convert a Gemara guidance document to an OSCAL Catalog"""
    return CatalogMapper(**kwargs).map(guidance)
