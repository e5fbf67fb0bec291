"""
Policy builder for role based access rules.

Applies the configured access rules to an authorization policy at startup.
Global rules are registered first, then each backend service's rules in the
order the services are declared. Registration order is evaluation order, so
global rules take precedence over service rules.

Each rule gets exactly one predicate, chosen in this order:

1. ``anonymous`` -> permit all
2. ``authenticated`` -> any authenticated caller
3. ``allowed-roles`` -> caller holds at least one of the (normalized) roles
4. nothing declared -> any authenticated caller, with a warning
"""

from typing import Any, List, Optional, Sequence

from shared.errors import ConfigurationError
from shared.logging import get_logger
from .models import GatewayConfigProperties, RoleBasedAccessRule
from .policy import AuthorizationPolicy, PolicyTarget
from .predicates import AccessPredicate

ROLE_PREFIX = "ROLE_"


def normalize_role(role_name: Optional[str]) -> str:
    """Return the role name with the ``ROLE_`` prefix, adding it if missing."""
    if not isinstance(role_name, str) or not role_name:
        raise ConfigurationError(
            "Role names must be non-empty strings",
            details={"role": role_name}
        )
    return role_name if role_name.startswith(ROLE_PREFIX) else ROLE_PREFIX + role_name


class AccessRulesCustomizer:
    """Registers the gateway's access rules on a policy target.

    ``logger`` is the sink for startup events; it defaults to the
    ``gateway.access_rules`` structlog logger.
    """

    def __init__(self, config: GatewayConfigProperties, logger: Optional[Any] = None):
        if config is None:
            raise ConfigurationError("Gateway configuration is required")
        self.config = config
        self.logger = logger if logger is not None else get_logger("gateway.access_rules")

    def customize(self, target: PolicyTarget) -> None:
        """Apply global rules, then per-service rules, to ``target``.

        Raises ``ConfigurationError`` on the first invalid rule; rules after
        it are not registered.
        """
        self.logger.info("Configuring proxied applications access rules")

        self.logger.info("Applying global access rules")
        self._apply_rules(target, self.config.global_access_rules)

        for name, service in self.config.services.items():
            self.logger.info("Applying access rules for backend service", service=name)
            self._apply_rules(target, service.access_rules, service=name)

    def _apply_rules(self, target: PolicyTarget, rules: Optional[List[RoleBasedAccessRule]],
                     service: Optional[str] = None) -> None:
        if not rules:
            self.logger.info("No access rules found", service=service)
            return

        for rule in rules:
            self.apply_rule(target, rule, service=service)

    def apply_rule(self, target: PolicyTarget, rule: RoleBasedAccessRule,
                   service: Optional[str] = None) -> AccessPredicate:
        """Validate one rule, resolve its predicate and register it."""
        patterns = self._resolve_patterns(rule, service)

        if rule.anonymous:
            self.logger.debug("Access rule anonymous", patterns=patterns)
            predicate = AccessPredicate.permit_all()
        elif rule.authenticated:
            self.logger.debug("Access rule authenticated", patterns=patterns)
            predicate = AccessPredicate.authenticated()
        elif rule.allowed_roles:
            roles = self._resolve_roles(patterns, rule.allowed_roles)
            predicate = AccessPredicate.has_any_role(roles)
        else:
            self.logger.warning(
                "Intercepted URLs have no access rule defined, defaulting to 'authenticated'",
                patterns=patterns,
                service=service
            )
            predicate = AccessPredicate.default_authenticated()

        target.register(patterns, predicate)
        return predicate

    def _resolve_patterns(self, rule: RoleBasedAccessRule, service: Optional[str]) -> List[str]:
        patterns = rule.intercept_url
        if patterns is None:
            raise ConfigurationError(
                "intercept-url is null",
                details={"service": service, "rule": rule.model_dump(by_alias=True)}
            )
        if not patterns:
            raise ConfigurationError(
                "No ant-pattern(s) defined for rule",
                details={"service": service, "rule": rule.model_dump(by_alias=True)}
            )
        for pattern in patterns:
            if not isinstance(pattern, str) or not pattern:
                raise ConfigurationError(
                    "intercept-url contains a null or empty pattern",
                    details={"service": service, "patterns": list(patterns)}
                )
        return list(patterns)

    def _resolve_roles(self, patterns: Sequence[str], allowed_roles: Sequence[Optional[str]]) -> List[str]:
        roles = [normalize_role(role) for role in allowed_roles]
        self.logger.debug("Access rule has any role", patterns=list(patterns), roles=",".join(roles))
        return roles


def build_policy(config: GatewayConfigProperties, logger: Optional[Any] = None) -> AuthorizationPolicy:
    """Build a fresh ``AuthorizationPolicy`` from the gateway configuration."""
    policy = AuthorizationPolicy()
    AccessRulesCustomizer(config, logger=logger).customize(policy)
    return policy
