"""Runtime settings for query handling.

Resolution order:
1. Explicit overrides (e.g. CLI options)
2. ``WHEREFILTER_*`` environment variables
3. Defaults

The environment is read fresh on every call; there is nothing worth caching.
"""

import os
from typing import Dict, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "WHEREFILTER_"


class Settings(BaseModel):
    """Settings shared by the library entry points and the CLI."""

    max_query_length: int = Field(default=4096, ge=0)
    """Longest decoded query accepted by ``preprocess_query_string``. 0 disables."""

    percent_decode: bool = False
    """Percent-decode queries before parsing (for queries copied from URLs)."""

    log_level: str = "WARNING"


def _from_environment(env: Dict[str, str]) -> Dict[str, str]:
    values = {}
    for name in Settings.model_fields:
        key = f"{ENV_PREFIX}{name.upper()}"
        if key in env:
            values[name] = env[key]
    return values


def load_settings(
    overrides: Optional[Dict[str, object]] = None,
    env: Optional[Dict[str, str]] = None,
) -> Settings:
    """Build settings from defaults, environment and explicit overrides.

    Args:
        overrides: Values that win over everything else; None entries are ignored
        env: Environment mapping (defaults to os.environ)

    Raises:
        pydantic.ValidationError: If a value cannot be coerced
    """
    env = env if env is not None else dict(os.environ)
    data: Dict[str, object] = dict(_from_environment(env))
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value
    return Settings.model_validate(data)


__all__ = ["ENV_PREFIX", "Settings", "load_settings"]
