"""
Domain Exceptions - Custom exceptions for domain-specific errors.
"""
from typing import Any, Dict, Optional


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    All domain exceptions should inherit from this class to allow
    for consistent error handling across the application.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            'error': self.code,
            'message': self.message,
            'details': self.details
        }


class EntityNotFoundException(DomainException):
    """Raised when a requested entity cannot be found."""

    def __init__(
        self,
        entity_type: str,
        entity_id: Optional[str] = None,
        message: Optional[str] = None
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} not found"
        if entity_id:
            msg = f"{entity_type} with id '{entity_id}' not found"
        super().__init__(
            message=msg,
            code='ENTITY_NOT_FOUND',
            details={'entity_type': entity_type, 'entity_id': entity_id}
        )


class ValidationException(DomainException):
    """
    Raised when domain validation fails.

    Can contain multiple validation errors for different fields.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[Dict[str, list]] = None
    ):
        self.errors = errors or {}
        super().__init__(
            message=message,
            code='VALIDATION_ERROR',
            details={'validation_errors': self.errors}
        )


class AuthenticationException(DomainException):
    """Raised when a bearer token is missing or cannot be verified."""

    def __init__(self, message: str = "Unauthorized - Invalid token"):
        super().__init__(message=message, code='NOT_AUTHENTICATED')


class AuthorizationException(DomainException):
    """Raised when user lacks permission for an operation."""

    def __init__(
        self,
        message: str = "Not authorized to perform this action",
        required_role: Optional[str] = None,
    ):
        details = {}
        if required_role:
            details['required_role'] = required_role
        super().__init__(
            message=message,
            code='NOT_AUTHORIZED',
            details=details
        )


class BusinessRuleViolationException(DomainException):
    """
    Raised when a business rule is violated.

    Used for domain invariant violations that are not simple validations.
    """

    def __init__(
        self,
        rule: str,
        message: Optional[str] = None
    ):
        self.rule = rule
        super().__init__(
            message=message or f"Business rule violated: {rule}",
            code='BUSINESS_RULE_VIOLATION',
            details={'rule': rule}
        )


class ConfigurationException(DomainException):
    """Raised at startup when required configuration is missing or invalid."""

    def __init__(self, message: str, setting: Optional[str] = None):
        self.setting = setting
        super().__init__(
            message=message,
            code='CONFIGURATION_ERROR',
            details={'setting': setting} if setting else {}
        )


class DatastoreException(DomainException):
    """Raised when a read or write against the summary datastore fails."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(
            message=f"{operation} failed: {message}",
            code='DATASTORE_ERROR',
            details={'operation': operation}
        )


class IdentityProviderException(DomainException):
    """Raised when the identity provider returns an unexpected response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(
            message=message,
            code='IDENTITY_PROVIDER_ERROR',
            details={'status_code': status_code}
        )
