"""Runtime settings read from the environment."""

import os
from pathlib import Path
from typing import Optional


def get_template_config_dir() -> Optional[Path]:
    """Directory holding extra clause/template JSON, from GRC_TEMPLATE_CONFIG_DIR.

    Returns None when the variable is unset or blank.
    """
    value = os.getenv("GRC_TEMPLATE_CONFIG_DIR")
    if value is None or not value.strip():
        return None
    return Path(value.strip())
