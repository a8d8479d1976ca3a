from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from .graph import build
from .models import ExternalIds, ResourceGraph
from .topology import resolve
from .validator import validate

logger = structlog.get_logger(__name__)


def plan(raw: Mapping[str, Any], external_ids: ExternalIds | None = None) -> ResourceGraph:
    """Validate raw configuration, resolve its topology and build the resource graph.

    Args:
        raw: Raw site configuration (camelCase or snake_case keys)
        external_ids: Engine-owned identifiers, if already known

    Returns:
        The resource graph for the site

    Raises:
        ValidationError: If the configuration is rejected
        GraphConsistencyError: If the planned graph is inconsistent
    """
    config = validate(raw)
    logger.info(
        "site_config_validated",
        domain_name=config.domain_name,
        www_mode=config.www_mode.value if config.www_mode else None,
    )

    return build(resolve(config), config, external_ids)
