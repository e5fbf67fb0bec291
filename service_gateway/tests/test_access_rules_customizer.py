"""
Unit tests for AccessRulesCustomizer.
"""

import pytest
from unittest.mock import MagicMock, call

from service_gateway.app.accessrules.customizer import (
    AccessRulesCustomizer, build_policy, normalize_role
)
from service_gateway.app.accessrules.models import (
    GatewayConfigProperties, RoleBasedAccessRule, Service
)
from service_gateway.app.accessrules.policy import AuthorizationPolicy
from service_gateway.app.accessrules.predicates import AccessPredicate, PredicateKind
from shared.errors import ConfigurationError


def rule(patterns, **kwargs):
    return RoleBasedAccessRule(intercept_url=patterns, **kwargs)


class TestNormalizeRole:
    """Test cases for role normalization."""

    def test_adds_prefix(self):
        assert normalize_role("ADMIN") == "ROLE_ADMIN"

    def test_keeps_prefixed_role(self):
        assert normalize_role("ROLE_USER") == "ROLE_USER"

    def test_prefix_is_case_sensitive(self):
        assert normalize_role("role_user") == "ROLE_role_user"

    @pytest.mark.parametrize("role_name", [None, ""])
    def test_rejects_missing_role(self, role_name):
        with pytest.raises(ConfigurationError) as exc_info:
            normalize_role(role_name)

        assert exc_info.value.code == "CONFIGURATION_ERROR"


class TestApplyRule:
    """Test cases for single rule predicate resolution."""

    @pytest.fixture
    def logger(self):
        return MagicMock()

    @pytest.fixture
    def target(self):
        return MagicMock()

    @pytest.fixture
    def customizer(self, logger):
        return AccessRulesCustomizer(GatewayConfigProperties(), logger=logger)

    def test_anonymous_permits_all(self, customizer, target):
        customizer.apply_rule(target, rule(["/login"], anonymous=True))

        target.register.assert_called_once_with(["/login"], AccessPredicate.permit_all())

    def test_anonymous_wins_over_other_flags(self, customizer, target):
        customizer.apply_rule(
            target,
            rule(["/public/**"], anonymous=True, authenticated=True, allowed_roles=["ADMIN"])
        )

        patterns, predicate = target.register.call_args[0]
        assert patterns == ["/public/**"]
        assert predicate.kind == PredicateKind.PERMIT_ALL
        assert predicate.roles == ()

    def test_authenticated_wins_over_roles(self, customizer, target, logger):
        customizer.apply_rule(target, rule(["/api/**"], authenticated=True, allowed_roles=["ADMIN"]))

        target.register.assert_called_once_with(["/api/**"], AccessPredicate.authenticated())
        logger.warning.assert_not_called()

    def test_roles_are_normalized(self, customizer, target):
        predicate = customizer.apply_rule(target, rule(["/secure"], allowed_roles=["ROLE_USER", "OP"]))

        assert predicate.kind == PredicateKind.HAS_ANY_ROLE
        assert predicate.roles == ("ROLE_USER", "ROLE_OP")
        target.register.assert_called_once_with(["/secure"], predicate)

    def test_roles_keep_declared_order(self, customizer, target):
        predicate = customizer.apply_rule(target, rule(["/x"], allowed_roles=["B", "A", "ROLE_C"]))

        assert predicate.roles == ("ROLE_B", "ROLE_A", "ROLE_C")

    def test_multiple_patterns_registered_together(self, customizer, target):
        customizer.apply_rule(target, rule(["/a/**", "/b/**"], authenticated=True))

        target.register.assert_called_once()
        assert target.register.call_args[0][0] == ["/a/**", "/b/**"]

    def test_no_predicate_defaults_to_authenticated_with_warning(self, customizer, target, logger):
        predicate = customizer.apply_rule(target, rule(["/unspecified"]))

        assert predicate.kind == PredicateKind.AUTHENTICATED
        assert predicate.defaulted is True
        target.register.assert_called_once_with(["/unspecified"], predicate)
        assert logger.warning.call_count == 1
        assert logger.warning.call_args[1]["patterns"] == ["/unspecified"]

    def test_empty_roles_default_to_authenticated(self, customizer, target, logger):
        predicate = customizer.apply_rule(target, rule(["/x"], allowed_roles=[]))

        assert predicate == AccessPredicate.default_authenticated()
        assert logger.warning.call_count == 1

    def test_explicit_rules_do_not_warn(self, customizer, target, logger):
        customizer.apply_rule(target, rule(["/a"], anonymous=True))
        customizer.apply_rule(target, rule(["/b"], authenticated=True))
        customizer.apply_rule(target, rule(["/c"], allowed_roles=["USER"]))

        logger.warning.assert_not_called()
        assert target.register.call_count == 3

    def test_null_patterns_rejected(self, customizer, target):
        with pytest.raises(ConfigurationError):
            customizer.apply_rule(target, rule(None, anonymous=True))

        target.register.assert_not_called()

    def test_empty_patterns_rejected(self, customizer, target):
        with pytest.raises(ConfigurationError) as exc_info:
            customizer.apply_rule(target, rule([], anonymous=True))

        assert "ant-pattern" in exc_info.value.message
        target.register.assert_not_called()

    @pytest.mark.parametrize("patterns", [["/ok", None], [None], ["/ok", ""]])
    def test_null_pattern_element_rejected(self, customizer, target, patterns):
        with pytest.raises(ConfigurationError):
            customizer.apply_rule(target, rule(patterns, authenticated=True))

        target.register.assert_not_called()

    def test_null_role_rejected(self, customizer, target):
        with pytest.raises(ConfigurationError):
            customizer.apply_rule(target, rule(["/x"], allowed_roles=["ADMIN", None]))

        target.register.assert_not_called()

    def test_null_role_ignored_when_anonymous(self, customizer, target):
        customizer.apply_rule(target, rule(["/x"], anonymous=True, allowed_roles=[None]))

        target.register.assert_called_once_with(["/x"], AccessPredicate.permit_all())


class TestCustomize:
    """Test cases for building a whole policy."""

    @pytest.fixture
    def logger(self):
        return MagicMock()

    def test_global_then_service_rules(self, logger):
        config = GatewayConfigProperties(
            global_access_rules=[rule(["/login"], anonymous=True)],
            services={"ldap": Service(access_rules=[rule(["/ldap/**"], allowed_roles=["ADMIN"])])}
        )
        target = MagicMock()

        AccessRulesCustomizer(config, logger=logger).customize(target)

        assert target.register.call_args_list == [
            call(["/login"], AccessPredicate.permit_all()),
            call(["/ldap/**"], AccessPredicate.has_any_role(["ROLE_ADMIN"])),
        ]

    def test_services_visited_in_declared_order(self, logger):
        config = GatewayConfigProperties(services={
            "zeta": Service(access_rules=[rule(["/zeta/1"], authenticated=True), rule(["/zeta/2"], anonymous=True)]),
            "alpha": Service(access_rules=[rule(["/alpha"], authenticated=True)]),
            "mid": Service(access_rules=[rule(["/mid"], allowed_roles=["USER"])]),
        })
        policy = AuthorizationPolicy()

        AccessRulesCustomizer(config, logger=logger).customize(policy)

        assert [b.patterns for b in policy] == [("/zeta/1",), ("/zeta/2",), ("/alpha",), ("/mid",)]

    def test_empty_rule_lists_are_skipped(self, logger):
        config = GatewayConfigProperties(
            global_access_rules=[],
            services={
                "empty": Service(access_rules=[]),
                "missing": Service(),
                "console": Service(access_rules=[rule(["/console/**"], allowed_roles=["SUPERUSER"])]),
            }
        )
        policy = AuthorizationPolicy()

        AccessRulesCustomizer(config, logger=logger).customize(policy)

        assert len(policy) == 1
        no_rules = [c for c in logger.info.call_args_list if c[0][0] == "No access rules found"]
        assert len(no_rules) == 3

    def test_empty_configuration_registers_nothing(self, logger):
        target = MagicMock()

        AccessRulesCustomizer(GatewayConfigProperties(), logger=logger).customize(target)

        target.register.assert_not_called()

    def test_one_warning_per_underspecified_rule(self, logger):
        config = GatewayConfigProperties(
            global_access_rules=[rule(["/a"]), rule(["/b"], anonymous=True)],
            services={"svc": Service(access_rules=[rule(["/c"])])}
        )

        policy = build_policy(config, logger=logger)

        assert logger.warning.call_count == 2
        assert [b.predicate.defaulted for b in policy] == [True, False, True]

    def test_invalid_rule_aborts_build(self, logger):
        config = GatewayConfigProperties(
            global_access_rules=[rule(["/first"], anonymous=True), rule([], anonymous=True)],
            services={"after": Service(access_rules=[rule(["/after"], authenticated=True)])}
        )
        policy = AuthorizationPolicy()

        with pytest.raises(ConfigurationError):
            AccessRulesCustomizer(config, logger=logger).customize(policy)

        assert [b.patterns for b in policy] == [("/first",)]

    def test_invalid_service_rule_reports_service(self, logger):
        config = GatewayConfigProperties(
            services={"geoserver": Service(access_rules=[rule(["/geoserver/**", None])])}
        )

        with pytest.raises(ConfigurationError) as exc_info:
            build_policy(config, logger=logger)

        assert exc_info.value.details["service"] == "geoserver"

    def test_build_is_repeatable(self, logger):
        config = GatewayConfigProperties(
            global_access_rules=[rule(["/login"], anonymous=True)],
            services={"ldap": Service(access_rules=[rule(["/ldap/**"], allowed_roles=["ADMIN"])])}
        )

        first = build_policy(config, logger=logger)
        second = build_policy(config, logger=logger)

        assert first.bindings == second.bindings

    def test_config_required(self):
        with pytest.raises(ConfigurationError):
            AccessRulesCustomizer(None)
