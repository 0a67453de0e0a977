"""
Pydantic models for the admin seed configuration
"""

import re
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

Role = Literal["manager", "assistant_manager", "teamLead", "qa", "user"]

# Postgres identifiers interpolated into SQL (schema/table/column names)
_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


def _check_identifier(value: str) -> str:
    if not _IDENTIFIER.match(value):
        raise ValueError(f"invalid identifier: {value!r}")
    return value


class DependentTable(BaseModel):
    """Table whose rows reference a profile and must be removed before it"""
    db_schema: str = Field(alias="schema")
    table: str
    column: str

    model_config = {"populate_by_name": True}

    @field_validator("db_schema", "table", "column")
    @classmethod
    def check_identifiers(cls, value: str) -> str:
        return _check_identifier(value)

    @property
    def qualified_name(self) -> str:
        return f"{self.db_schema}.{self.table}"


class TenantConfig(BaseModel):
    """One tenant-specific schema"""
    db_schema: str = Field(alias="schema")
    label: str
    password_hash: str
    cascade: List[DependentTable] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @field_validator("db_schema")
    @classmethod
    def check_schema_identifier(cls, value: str) -> str:
        return _check_identifier(value)


class DomainConfig(BaseModel):
    """Allowed email domain"""
    ehs_id_prefix: str = Field(pattern=r"^[A-Z][A-Z0-9]*$")
    project_id: int


class DemoUser(BaseModel):
    """Demo record inserted by the seed routines"""
    name: str
    email: str
    role: Role
    domain: str
    project_id: Optional[int] = None


class SeedConfig(BaseModel):
    """Process-wide admin configuration: actor, demo records and tenants"""
    default_actor_id: str
    default_capacity: int = 50
    domains: Dict[str, DomainConfig]
    tenants: Dict[str, TenantConfig]
    demo_users: List[DemoUser]

    @model_validator(mode="after")
    def check_demo_domains(self) -> "SeedConfig":
        unknown = sorted({u.domain for u in self.demo_users} - set(self.domains))
        if unknown:
            raise ValueError(f"demo_users reference unknown domains: {', '.join(unknown)}")
        return self

    @property
    def allowed_domains(self) -> List[str]:
        return list(self.domains)

    def project_number_for(self, user: DemoUser) -> int:
        """Tenant-local project number a demo user is mapped to"""
        if user.project_id is not None:
            return user.project_id
        return self.domains[user.domain].project_id
