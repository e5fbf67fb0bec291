"""
API Gateway service for the gateway access layer.

Builds the access rules policy at startup. An invalid access rule aborts
startup; the gateway never runs with a partially built policy.
"""

from typing import Optional

from fastapi import Query

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import ValidationError
from service_gateway.app.accessrules import (
    AccessRulesCustomizer,
    AuthorizationPolicy,
    GatewayConfigProperties,
    load_gateway_config,
)


class GatewayService(BaseService):
    """API Gateway service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None,
                 gateway_config: Optional[GatewayConfigProperties] = None):
        super().__init__("gateway", 8000, config=config)
        self.gateway_config = gateway_config if gateway_config is not None else self._load_gateway_config()
        self.policy = self._build_policy()

        self._setup_gateway_routes()

    def _load_gateway_config(self) -> GatewayConfigProperties:
        rules_file = self.config.rules_file
        if not rules_file:
            self.logger.warning("No access rules file configured, using an empty rule set")
            return GatewayConfigProperties()
        return load_gateway_config(rules_file)

    def _build_policy(self) -> AuthorizationPolicy:
        policy = AuthorizationPolicy()
        customizer = AccessRulesCustomizer(self.gateway_config, logger=self.logger.bind(component="access_rules"))
        customizer.customize(policy)

        for binding in policy:
            self.metrics.record_access_rule(binding.predicate.kind.value, binding.predicate.defaulted)
        self.metrics.set_active_access_rules(len(policy))

        self.logger.info("Access rules policy built", bindings=len(policy))
        return policy

    def _setup_gateway_routes(self):
        """Set up gateway routes."""

        @self.app.get("/")
        async def root():
            return {
                "service": "gateway",
                "message": "Gateway Access Layer - API Gateway",
                "version": "1.0.0"
            }

        @self.app.get("/api/v1/access-rules")
        async def list_access_rules(predicate: Optional[str] = Query(None, description="Filter by predicate kind")):
            """Access rule bindings in evaluation order."""
            rules = [
                dict(binding.to_dict(), position=position)
                for position, binding in enumerate(self.policy)
                if predicate is None or binding.predicate.kind.value == predicate
            ]
            return {"rules": rules, "total": len(rules)}

        @self.app.get("/api/v1/access-rules/{position}")
        async def get_access_rule(position: int):
            """Access rule binding at an evaluation position."""
            bindings = self.policy.bindings
            if position < 0 or position >= len(bindings):
                raise ValidationError(
                    "No access rule at position",
                    details={"position": position, "total": len(bindings)}
                )
            return dict(bindings[position].to_dict(), position=position)


def create_app():
    """Create FastAPI application."""
    service = GatewayService()
    return service.app


if __name__ == "__main__":
    service = GatewayService()
    service.run()
