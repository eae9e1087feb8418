"""Configuration package.

Exposes the pydantic settings models and a loader that turns validation
failures into a single readable log line.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .model import ClientSettings, EndpointPaths


def load_settings(overrides: Mapping[str, Any] | None = None) -> ClientSettings:
    """Load and validate client settings.

    Args:
        overrides: Values taking precedence over environment defaults.

    Returns:
        Validated ClientSettings.

    Raises:
        ValueError: If the resulting settings are invalid.
    """
    try:
        return ClientSettings.from_env(**dict(overrides or {}))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        logging.error(f"❌ Invalid client settings: {problems}")
        raise ValueError(f"Invalid client settings: {problems}") from e


__all__ = ["ClientSettings", "EndpointPaths", "load_settings"]
