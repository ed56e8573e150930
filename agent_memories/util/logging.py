"""
Structured operation logging for the memory store.
Corpus retraining, index mutations and searches all report through here.
"""

import logging
from typing import Any, Dict, List

SENSITIVE_FIELDS = ['content', 'text', 'value', 'query', 'embedding', 'vector']


class StructuredLogger:
    """Structured logger for memory, corpus and vector index operations."""

    def __init__(self, name: str = "agent_memories"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def set_debug(self, enabled: bool) -> None:
        """Switch between DEBUG and INFO verbosity."""
        self.logger.setLevel(logging.DEBUG if enabled else logging.INFO)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None, level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.log(level, message)

    def log_memory_operation(self, operation: str, memory_id: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a memory repository operation."""
        log_details = {"memory_id": memory_id}
        if details:
            log_details.update(sanitize_payload(details))

        self.log_operation(f"memory.{operation}", status, log_details)

    def log_vector_operation(self, operation: str, record_id: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a vector index operation."""
        log_details = {"record_id": record_id}
        if details:
            log_details.update(details)

        self.log_operation(f"vector.{operation}", status, log_details, level=logging.DEBUG)

    def log_corpus_retrain(self, corpus_size: int, vocabulary_size: int, has_basis: bool, duration_ms: float):
        """Log a full corpus rebuild."""
        log_details = {
            "corpus_size": corpus_size,
            "vocabulary_size": vocabulary_size,
            "latent_basis": has_basis,
            "duration_ms": round(duration_ms, 2)
        }
        self.log_operation("corpus.retrain", "success", log_details)

    def log_decomposition_failure(self, rows: int, columns: int, error: Exception):
        """Log an SVD failure that was recovered by falling back to TF-IDF."""
        log_details = {
            "matrix_shape": (rows, columns),
            "error": str(error)[:100],
            "fallback": "truncated_tfidf"
        }
        self.log_operation("corpus.decomposition", "degraded", log_details, level=logging.WARNING)

    def log_search(self, result_count: int, threshold: float, limit: int, quality: str = None):
        """Log a similarity search."""
        log_details = {
            "results": result_count,
            "threshold": threshold,
            "limit": limit
        }
        if quality is not None:
            log_details["corpus_quality"] = quality

        self.log_operation("memory.search", "empty" if result_count == 0 else "success", log_details)

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


def sanitize_payload(payload: Any, reveal_sensitive: bool = False, sensitive_fields: List[str] = None) -> Any:
    """Sanitize payloads for operation logging."""
    if sensitive_fields is None:
        sensitive_fields = SENSITIVE_FIELDS

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if reveal_sensitive or k not in sensitive_fields:
                sanitized[k] = sanitize_payload(v, reveal_sensitive, sensitive_fields)
            else:
                sanitized[k] = "[REDACTED]"
        return sanitized
    elif isinstance(payload, str):
        # Truncate long strings
        return payload[:100] + "..." if len(payload) > 100 else payload
    elif isinstance(payload, list):
        return [sanitize_payload(item, reveal_sensitive, sensitive_fields) for item in payload]
    else:
        return payload
