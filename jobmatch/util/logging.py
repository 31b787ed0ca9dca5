"""
Structured logging for entity, vector, match and drift operations.
"""

import logging
from typing import Any, Dict, List

from jobmatch.core.config import debug_enabled


def _truncate(value: str, limit: int = 50) -> str:
    return value[:limit] + "..." if len(value) > limit else value


class StructuredLogger:
    """Structured logger for store, index, matching and drift operations."""

    def __init__(self, name: str = "jobmatch"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if debug_enabled() else logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status == "failed":
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_entity_operation(self, operation: str, kind: str, natural_key: str, record_id: int = None, status: str = "success"):
        """Log an attribute store operation."""
        details = {"kind": kind, "natural_key": _truncate(natural_key)}
        if record_id is not None:
            details["id"] = record_id

        self.log_operation(f"entity.{operation}", status, details)

    def log_vector_operation(self, operation: str, kind: str, record_id: int = None, details: Dict[str, Any] = None, status: str = "success"):
        """Log a vector index operation."""
        log_details = {"kind": kind}
        if record_id is not None:
            log_details["id"] = record_id
        if details:
            log_details.update(details)

        self.log_operation(f"vector.{operation}", status, log_details)

    def log_match_query(self, direction: str, natural_key: str, limit: int, result_count: int, status: str = "success"):
        """Log a match query and how many results it produced."""
        log_details = {
            "natural_key": _truncate(natural_key),
            "limit": limit,
            "result_count": result_count
        }
        self.log_operation(f"match.{direction}", status, log_details)

    def log_drift_finding(self, finding_type: str, severity: str, kind: str, record_id: int, details: Dict[str, Any] = None):
        """Log drift detection findings."""
        log_details = {
            "finding_type": finding_type,
            "severity": severity,
            "kind": kind,
            "id": record_id
        }
        if details:
            log_details.update(details)

        self.log_operation("drift.finding", "detected", log_details)

    def log_correction_applied(self, plan_id: str, actions: List[str], status: str = "success"):
        """Log correction plan execution."""
        log_details = {
            "plan_id": plan_id,
            "actions": actions,
            "actions_count": len(actions)
        }
        self.log_operation("correction.applied", status, log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
