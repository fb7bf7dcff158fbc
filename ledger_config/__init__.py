"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Services receive the returned LedgerConfig
    by constructor injection and never read files or environment
    variables themselves.

Architecture position:
    Configuration -- sits above ``ledger_kernel`` and below
    ``ledger_services``.  The kernel and the engines MUST NEVER import
    from ``ledger_config``.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``ConfigurationError`` -- invalid sections, keys or values.

Audit relevance:
    Every ``get_active_config()`` call emits a ``LEDGER_CONFIG_TRACE`` log
    record carrying the source path and checksum of the configuration in
    force.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ledger_config.loader import compute_checksum, load_config
from ledger_config.schema import LedgerConfig

_logger = logging.getLogger("ledger_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(config_path: Path | str | None = None) -> LedgerConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: YAML file to load.  Defaults to the packaged
            ``defaults.yaml``.

    Returns:
        A validated, frozen LedgerConfig.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = load_config(path)

    _logger.info(
        "LEDGER_CONFIG_TRACE",
        extra={
            "trace_type": "LEDGER_CONFIG_TRACE",
            "config_path": str(path),
            "checksum": config.checksum,
            "fetch_timeout_seconds": config.fetch_timeout_seconds,
            "max_workers": config.max_workers,
            "include_company_paid": config.include_company_paid,
            "reporting_currencies": [c.value for c in config.reporting_currencies],
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "LedgerConfig",
    "compute_checksum",
    "get_active_config",
    "load_config",
]
