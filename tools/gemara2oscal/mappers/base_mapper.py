"""
Base mapper class for OSCAL conversions

Provides the OSCAL object factories shared by the Gemara to OSCAL mappers.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional

from .extensions import TRESTLE_NAMESPACE


def format_timestamp(value: datetime) -> str:
    """Format a datetime as an OSCAL date-time, assuming UTC for naive values"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def stringify_value(value: Any) -> Optional[str]:
    """Render a scalar parameter value as OSCAL text; None and empty values yield None"""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    text = str(value)
    return text or None


class BaseMapper(ABC):
    """Base class for all Gemara to OSCAL mappers"""

    OSCAL_VERSION = "1.1.3"

    def __init__(self, uuid_factory: Optional[Callable[[], str]] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.uuid_factory = uuid_factory or (lambda: str(uuid.uuid4()))
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.timestamp = format_timestamp(self.clock())

    def generate_uuid(self) -> str:
        """Generate UUID for OSCAL objects"""
        return self.uuid_factory()

    def create_oscal_metadata(self, title: str, **kwargs) -> Dict[str, Any]:
        """Create OSCAL metadata section"""
        metadata = {
            "title": title,
            "last-modified": kwargs.get("last_modified", self.timestamp),
            "version": kwargs.get("version") or "0.1.0",
            "oscal-version": self.OSCAL_VERSION
        }

        if kwargs.get("published"):
            metadata["published"] = kwargs["published"]

        if kwargs.get("roles"):
            metadata["roles"] = kwargs["roles"]

        if kwargs.get("parties"):
            metadata["parties"] = kwargs["parties"]

        if kwargs.get("responsible_parties"):
            metadata["responsible-parties"] = kwargs["responsible_parties"]

        return metadata

    def create_party(self, name: str, party_type: str = "organization",
                     uuid_val: Optional[str] = None) -> Dict[str, Any]:
        """Create OSCAL party object"""
        return {
            "uuid": uuid_val or self.generate_uuid(),
            "type": party_type,
            "name": name
        }

    def create_role(self, role_id: str, title: str, description: Optional[str] = None) -> Dict[str, Any]:
        """Create OSCAL role object"""
        role = {
            "id": role_id,
            "title": title
        }

        if description:
            role["description"] = description

        return role

    def create_property(self, name: str, value: str, **kwargs) -> Dict[str, Any]:
        """Create OSCAL property object"""
        prop = {
            "name": name,
            "value": value
        }

        if "ns" in kwargs:
            prop["ns"] = kwargs["ns"]

        if "class" in kwargs:
            prop["class"] = kwargs["class"]

        if kwargs.get("remarks"):
            prop["remarks"] = kwargs["remarks"]

        return prop

    def create_trestle_property(self, name: str, value: str,
                                remarks: Optional[str] = None) -> Dict[str, Any]:
        """Create property in the trestle extension namespace"""
        return self.create_property(name, value, ns=TRESTLE_NAMESPACE, remarks=remarks)

    def create_link(self, href: str, rel: str, **kwargs) -> Dict[str, Any]:
        """Create OSCAL link object"""
        link = {
            "href": href,
            "rel": rel
        }

        if "media_type" in kwargs:
            link["media-type"] = kwargs["media_type"]

        if "text" in kwargs:
            link["text"] = kwargs["text"]

        return link

    def create_back_matter_resource(self, title: str, href: Optional[str] = None,
                                    description: Optional[str] = None,
                                    uuid_val: Optional[str] = None,
                                    **kwargs) -> Dict[str, Any]:
        """Create back-matter resource"""
        resource = {
            "uuid": uuid_val or self.generate_uuid(),
            "title": title
        }

        if description:
            resource["description"] = description

        if kwargs.get("props"):
            resource["props"] = kwargs["props"]

        if kwargs.get("citation"):
            resource["citation"] = {"text": kwargs["citation"]}

        if href:
            resource["rlinks"] = [
                {
                    "href": href
                }
            ]

        return resource

    @abstractmethod
    def map(self, *args, **kwargs) -> Dict[str, Any]:
        """Map Gemara data to OSCAL format"""
        pass
