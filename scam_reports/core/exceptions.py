"""Domain-level exception hierarchy for service and repository layers."""

from __future__ import annotations


class DomainError(Exception):
    """Base class for domain-specific failures."""


class UnauthenticatedError(DomainError):
    """Raised when the caller has no valid user token."""


class ForbiddenError(DomainError):
    """Raised when the caller is authenticated but lacks the required role."""


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist (or belongs to another company)."""


class ConflictError(DomainError):
    """Raised when a state conflict occurs (e.g. a report that was already reviewed)."""


class ValidationError(DomainError):
    """Raised when input validation fails at the domain/service layer."""


class UpstreamError(DomainError):
    """Raised when the database or the Whop API fails."""
