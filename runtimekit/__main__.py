"""
Entry point for running a runtime setup as a module.

Usage: python -m runtimekit

Configuration comes from the YAML file named by RUNTIMEKIT_CONFIG when set,
otherwise from CI action inputs (INPUT_DISTRIBUTION, INPUT_JAVA-VERSION, ...).
RUNTIMEKIT_LOG_LEVEL selects the log level (default: INFO).
"""

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

from runtimekit.config import config_from_env, load_config
from runtimekit.core.exceptions import RuntimeKitError
from runtimekit.distributions import get_installer

logger = logging.getLogger("runtimekit")


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    if level == logging.DEBUG:
        format_str = "%(levelname)s [%(name)s] %(message)s"
    else:
        format_str = "%(message)s"

    logging.basicConfig(level=level, format=format_str, force=True)


def main(environ: Optional[Mapping[str, str]] = None) -> int:
    """
    Run one setup.

    Returns:
        Exit code: 0 on success, 1 on failure
    """
    environ = os.environ if environ is None else environ
    _configure_logging(environ.get("RUNTIMEKIT_LOG_LEVEL", "INFO"))

    try:
        config_path = environ.get("RUNTIMEKIT_CONFIG")
        if config_path:
            config = load_config(Path(config_path))
        else:
            config = config_from_env(environ)

        installer = get_installer(
            config.distribution, config.options, **config.installer_kwargs()
        )
        asyncio.run(installer.setup())
    except RuntimeKitError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        # Diagnostics were already logged by the installer
        logger.debug(f"Setup failed: {e!r}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
