"""
Common utilities shared across the update center packages
"""

from .logging_config import configure_logging, get_logger, get_logging_manager
from .output_manager import atomic_write_text, save_output
from .telemetry import get_telemetry_manager, trace_function, trace_operation

__all__ = [
    "configure_logging",
    "get_logger",
    "get_logging_manager",
    "get_telemetry_manager",
    "trace_function",
    "trace_operation",
    "atomic_write_text",
    "save_output",
]
