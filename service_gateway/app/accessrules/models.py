"""
Configuration model for gateway access rules.

Field aliases follow the YAML keys used in the gateway configuration file
(``intercept-url``, ``allowed-roles``, ``global-access-rules``,
``access-rules``). Pattern and role lists tolerate ``None`` entries at parse
time; rejecting them is the policy builder's job. A plain string is read
as a comma separated list, blank items dropped. A null flag reads as false.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RoleBasedAccessRule(BaseModel):
    """One access rule: URL patterns guarded by a single access predicate."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    intercept_url: Optional[List[Optional[str]]] = Field(
        default=None, alias="intercept-url", description="Ant-style path patterns"
    )
    anonymous: bool = Field(False, description="Grant unconditional access")
    authenticated: bool = Field(False, description="Require an authenticated caller")
    allowed_roles: Optional[List[Optional[str]]] = Field(
        default=None, alias="allowed-roles", description="Roles granted access"
    )

    @field_validator("intercept_url", "allowed_roles", mode="before")
    @classmethod
    def _split_comma_separated(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("anonymous", "authenticated", mode="before")
    @classmethod
    def _null_flag(cls, value):
        return False if value is None else value


class Service(BaseModel):
    """A proxied backend service and its access rules."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    target: Optional[str] = Field(None, description="Backend service URL")
    access_rules: Optional[List[RoleBasedAccessRule]] = Field(
        default=None, alias="access-rules", description="Service access rules"
    )


class GatewayConfigProperties(BaseModel):
    """Global access rules plus per-service overrides.

    ``services`` keeps the declaration order of the source document; the
    policy builder visits services in that order.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    global_access_rules: Optional[List[RoleBasedAccessRule]] = Field(
        default=None, alias="global-access-rules", description="Rules applied before any service rule"
    )
    services: Dict[str, Service] = Field(default_factory=dict, description="Backend services by name")

    @field_validator("services", mode="before")
    @classmethod
    def _null_services(cls, value):
        return {} if value is None else value
