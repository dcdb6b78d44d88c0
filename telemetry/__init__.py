"""Telemetry: structured logging of terms and gradient checks (exports per telemetry.logging)."""
from .logging import DEFAULT_LOGGER_NAME, format_fields, get_logger, log_gradient_check, log_term_constructed

__all__ = ["DEFAULT_LOGGER_NAME", "get_logger", "format_fields", "log_gradient_check", "log_term_constructed"]
