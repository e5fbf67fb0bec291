"""
Gateway access rules configuration loading.
"""

from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError as SchemaValidationError

from shared.errors import ConfigurationError
from shared.logging import get_logger
from .models import GatewayConfigProperties

logger = get_logger("gateway.access_rules.loader")


def _gateway_section(data: Dict[str, Any]) -> Dict[str, Any]:
    """Locate the gateway section: root, ``gateway:`` or ``georchestra.gateway:``.

    ``georchestra.gateway`` may be nested mappings or a single dotted key.
    """
    if isinstance(data.get("georchestra.gateway"), dict):
        return data["georchestra.gateway"]
    georchestra = data.get("georchestra")
    if isinstance(georchestra, dict) and isinstance(georchestra.get("gateway"), dict):
        return georchestra["gateway"]
    if isinstance(data.get("gateway"), dict):
        return data["gateway"]
    return data


def parse_gateway_config(data: Optional[Dict[str, Any]], source: Optional[str] = None) -> GatewayConfigProperties:
    """Validate a configuration mapping into ``GatewayConfigProperties``."""
    if data is None:
        return GatewayConfigProperties()

    if not isinstance(data, dict):
        raise ConfigurationError(
            "Gateway configuration must be a mapping",
            details={"path": source, "type": type(data).__name__}
        )

    try:
        return GatewayConfigProperties.model_validate(_gateway_section(data))
    except SchemaValidationError as e:
        raise ConfigurationError(
            "Invalid gateway access rules configuration",
            details={"path": source, "errors": e.errors(include_url=False)}
        ) from e


def load_gateway_config(path: str) -> GatewayConfigProperties:
    """Load gateway access rules from a YAML file.

    ``yaml.safe_load`` keeps mapping order, so services are visited in the
    order they are written in the file.
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError("Access rules file not found", details={"path": path}) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            "Access rules file is not valid YAML",
            details={"path": path, "error": str(e)}
        ) from e

    config = parse_gateway_config(data, source=path)
    logger.info(
        "Loaded access rules configuration",
        path=path,
        global_rules=len(config.global_access_rules or []),
        services=list(config.services)
    )
    return config
