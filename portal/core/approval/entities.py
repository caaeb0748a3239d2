"""Per-kind configuration for the approval workflow.

The workflow itself only touches envelope columns; everything that differs
between projects, funding applications and IP records lives here.
"""

from typing import NamedTuple, Optional, Tuple, Type

from pydantic import BaseModel

from portal.core.errors import ValidationError
from portal.core.rbac.permissions import EntityKind
from portal.db.models import FundingApplication, IPRecord, Project

from .payloads import (
    FundingChanges,
    FundingCreate,
    IPRecordChanges,
    IPRecordCreate,
    ProjectChanges,
    ProjectCreate,
)
from .states import FundingStatus, ProjectStatus


class EntityConfig(NamedTuple):
    kind: EntityKind
    model: type
    create_schema: Type[BaseModel]
    change_schema: Type[BaseModel]
    label: str
    secondary_field: str
    # None means the secondary status is free-form
    secondary_values: Optional[Tuple[str, ...]]
    search_fields: Tuple[str, ...]
    link: str

    def link_for(self, entity_id) -> str:
        return self.link.format(id=entity_id)


ENTITY_CONFIGS = {
    EntityKind.PROJECT: EntityConfig(
        kind=EntityKind.PROJECT,
        model=Project,
        create_schema=ProjectCreate,
        change_schema=ProjectChanges,
        label="Project",
        secondary_field="project_status",
        secondary_values=tuple(s.value for s in ProjectStatus),
        search_fields=("title", "description", "category"),
        link="/projects/{id}",
    ),
    EntityKind.FUNDING: EntityConfig(
        kind=EntityKind.FUNDING,
        model=FundingApplication,
        create_schema=FundingCreate,
        change_schema=FundingChanges,
        label="Funding Application",
        secondary_field="funding_status",
        secondary_values=tuple(s.value for s in FundingStatus),
        search_fields=("title", "description", "grant_type"),
        link="/funding/{id}",
    ),
    EntityKind.IP_RECORD: EntityConfig(
        kind=EntityKind.IP_RECORD,
        model=IPRecord,
        create_schema=IPRecordCreate,
        change_schema=IPRecordChanges,
        label="IP Record",
        secondary_field="status",
        secondary_values=None,
        search_fields=("title", "abstract", "inventors"),
        link="/ip-records/{id}",
    ),
}


def get_entity_config(kind) -> EntityConfig:
    try:
        return ENTITY_CONFIGS[EntityKind(kind)]
    except ValueError:
        raise ValidationError(f"Unknown entity kind: {kind}")
