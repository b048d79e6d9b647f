"""Logging context management with request IDs and hierarchical tracking."""

import contextlib
import contextvars
import secrets
import time
from dataclasses import dataclass, field
from typing import Any

import structlog


# Context variables for async propagation
_request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_span_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "span_id", default=None
)
_parent_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "parent_id", default=None
)
_operation_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)

_BOUND_KEYS = ("request_id", "span_id", "parent_id", "operation")


def _generate_id() -> str:
    """Generate a 12-character hexadecimal ID for request/span tracking."""
    return secrets.token_hex(6)


@dataclass
class LoggingContext:
    """Logging context with request IDs and hierarchical tracking.

    A resolution opens a root context; the stitch that follows it opens a
    child context that inherits the ``request_id``. Context is propagated
    across awaits via contextvars.

    Example:
        ```python
        async with LoggingContext(operation="resolve") as ctx:
            ctx.set_namespace("chain", start="sample_wrapper.xml")
            logger.info("vast.chain.started", **ctx.to_log_dict())
        ```
    """

    request_id: str | None = None
    span_id: str | None = None
    parent_id: str | None = None
    operation: str | None = None

    # Namespace-grouped context
    result: dict[str, Any] = field(default_factory=dict)
    _custom_namespaces: dict[str, dict[str, Any]] = field(default_factory=dict)

    _start_time: float = field(default_factory=time.time)
    _tokens: list[tuple[contextvars.ContextVar, contextvars.Token]] = field(
        default_factory=list, init=False, repr=False
    )

    def __post_init__(self) -> None:
        """Inherit IDs from an enclosing context or generate new ones."""
        if self.request_id is None:
            self.request_id = _request_id_var.get() or _generate_id()
        if self.span_id is None:
            self.span_id = _generate_id()
        if self.parent_id is None:
            self.parent_id = _span_id_var.get()

    def __enter__(self) -> "LoggingContext":
        """Enter context and bind to contextvars."""
        self._tokens = [
            (_request_id_var, _request_id_var.set(self.request_id)),
            (_span_id_var, _span_id_var.set(self.span_id)),
            (_parent_id_var, _parent_id_var.set(self.parent_id)),
            (_operation_var, _operation_var.set(self.operation)),
        ]
        structlog.contextvars.bind_contextvars(
            request_id=self.request_id,
            span_id=self.span_id,
            parent_id=self.parent_id,
            operation=self.operation,
        )
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit context and restore the enclosing context."""
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens = []

        if _request_id_var.get() is None:
            structlog.contextvars.unbind_contextvars(*_BOUND_KEYS)
        else:
            structlog.contextvars.bind_contextvars(
                request_id=_request_id_var.get(),
                span_id=_span_id_var.get(),
                parent_id=_parent_id_var.get(),
                operation=_operation_var.get(),
            )

    async def __aenter__(self) -> "LoggingContext":
        """Async context manager entry."""
        return self.__enter__()

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        self.__exit__(exc_type, exc_val, exc_tb)

    def to_log_dict(self, include_namespaces: bool = True) -> dict[str, Any]:
        """Convert context to dictionary for logging.

        Args:
            include_namespaces: Whether to include namespace groups

        Returns:
            Dictionary with context fields suitable for structured logging
        """
        log_dict: dict[str, Any] = {
            "request_id": self.request_id,
            "span_id": self.span_id,
        }
        if self.parent_id:
            log_dict["parent_id"] = self.parent_id
        if self.operation:
            log_dict["operation"] = self.operation

        if include_namespaces:
            if self.result:
                log_dict["result"] = self.result
            for namespace, fields in self._custom_namespaces.items():
                if fields:
                    log_dict[namespace] = fields

        return log_dict

    def set_namespace(self, namespace: str, **fields: Any) -> None:
        """Set fields in a namespace ("result" or any custom name)."""
        if namespace == "result":
            self.result.update(fields)
        else:
            self._custom_namespaces.setdefault(namespace, {}).update(fields)

    def get_duration(self) -> float:
        """Elapsed time since context creation, in seconds."""
        return time.time() - self._start_time


def clear_context() -> None:
    """Clear all logging context from contextvars."""
    _request_id_var.set(None)
    _span_id_var.set(None)
    _parent_id_var.set(None)
    _operation_var.set(None)

    with contextlib.suppress(KeyError):
        structlog.contextvars.unbind_contextvars(*_BOUND_KEYS)


__all__ = [
    "LoggingContext",
    "clear_context",
]
