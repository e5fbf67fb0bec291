"""
Role based access rules for proxied backend services.

Turns the declarative access rules of the gateway configuration (global
rules plus per-service rules) into an ordered list of (patterns, predicate)
bindings. The request authorization runtime evaluates the bindings in
registration order and the first matching binding decides.

Modules of interest:
- models: Configuration model (rules, services, gateway properties).
- predicates: Closed set of access predicates and the binding type.
- policy: Ordered registration sink.
- customizer: Validation, predicate resolution and registration.
- loader: YAML configuration loading.
"""

from .models import GatewayConfigProperties, RoleBasedAccessRule, Service
from .predicates import AccessPredicate, PredicateKind, ResolvedBinding
from .policy import AuthorizationPolicy, PolicyTarget
from .customizer import AccessRulesCustomizer, build_policy, normalize_role
from .loader import load_gateway_config, parse_gateway_config

__all__ = [
    "AccessPredicate",
    "AccessRulesCustomizer",
    "AuthorizationPolicy",
    "GatewayConfigProperties",
    "PolicyTarget",
    "PredicateKind",
    "ResolvedBinding",
    "RoleBasedAccessRule",
    "Service",
    "build_policy",
    "load_gateway_config",
    "normalize_role",
    "parse_gateway_config",
]
