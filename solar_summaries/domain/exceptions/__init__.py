"""
Domain exceptions.
"""
from .domain_exceptions import (
    DomainException,
    EntityNotFoundException,
    ValidationException,
    AuthenticationException,
    AuthorizationException,
    BusinessRuleViolationException,
    ConfigurationException,
    DatastoreException,
    IdentityProviderException,
)

__all__ = [
    'DomainException',
    'EntityNotFoundException',
    'ValidationException',
    'AuthenticationException',
    'AuthorizationException',
    'BusinessRuleViolationException',
    'ConfigurationException',
    'DatastoreException',
    'IdentityProviderException',
]
