"""
Monitoring module exports.
"""

from gridmesh.monitoring.logger import (
    GridLogAdapter,
    JSONFormatter,
    get_logger,
    log_grid_event,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "log_grid_event",
    "JSONFormatter",
    "GridLogAdapter",
]
