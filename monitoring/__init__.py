# =============================================================================
# PR ASSIGNEE - MONITORING PACKAGE
# =============================================================================
"""
Monitoring Package

Logging infrastructure for the PR assignee.

Components:
    - Logger: structlog-rendered stdlib logging with context binding

Usage:
    from monitoring import setup_logging, log_context

    setup_logging(level="INFO", fmt="text")

    with log_context(pr_number=123):
        logger.info("Assigning reviewer")
"""

from monitoring.logger import (
    setup_logging,
    LogContext,
    log_context,
    mask_sensitive_data,
    mask_dict,
)


__all__ = [
    "setup_logging",
    "LogContext",
    "log_context",
    "mask_sensitive_data",
    "mask_dict",
]
