"""Logging and tracing setup for the service."""

from permit_workflow.shared.telemetry.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
