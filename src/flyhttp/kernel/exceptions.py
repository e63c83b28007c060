"""Unified exception hierarchy for flyhttp.

All library exceptions inherit from FlyHttpException, enabling unified
error handling across modules.

Categories:
- BusinessException: Caller mistakes, rejected arguments
- InfrastructureException: Timeouts, failed calls, network failures
- ExternalServiceException: Failures reported by the network engine
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class FlyHttpException(Exception):
    """Base exception for all flyhttp errors.

    Carries an optional error code and context dict for structured error data.
    Catch FlyHttpException to handle every library error, or catch specific
    subclasses for targeted handling.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "ENGINE_FAILURE").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(FlyHttpException):
    """Caller-side rule violations."""


class InvalidArgumentException(BusinessException):
    """An argument was rejected before any work was scheduled."""


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(FlyHttpException):
    """Infrastructure failures: timeouts, network, failed executions."""


class OperationTimeoutException(InfrastructureException):
    """Operation exceeded its allowed time limit."""


class CursorFailedException(InfrastructureException):
    """A response was requested from a cursor whose call failed.

    The engine-reported cause is chained as ``__cause__``.
    """


# =============================================================================
# External Service Exceptions
# =============================================================================


class ExternalServiceException(InfrastructureException):
    """Failure communicating with an external service."""


class EngineException(ExternalServiceException):
    """The network engine reported a transport or protocol failure."""


class GatewayTimeoutException(ExternalServiceException):
    """The engine did not receive a timely response from the remote host."""
