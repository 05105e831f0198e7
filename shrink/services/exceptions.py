"""Exceptions for the URL shortener service layer.

This module contains the exception hierarchy for the service layer,
providing domain-specific exceptions that abstract underlying implementation details.
"""


class ServiceError(Exception):
    """Base exception for all service-level errors."""
    pass


class ValidationError(ServiceError):
    """Input failed validation before anything was written."""
    pass


class InvalidURLError(ValidationError):
    """The URL format is invalid."""
    pass


class InvalidAliasError(ValidationError):
    """The requested custom alias doesn't meet requirements."""
    pass


class AliasTakenError(ServiceError):
    """The requested custom alias is already in use."""
    pass


class URLNotFoundError(ServiceError):
    """URL with the specified short code was not found."""
    pass


class StoreError(ServiceError):
    """The record store failed or timed out."""
    pass


class StoreExhaustedError(StoreError):
    """No free short code was found within the allowed attempts."""
    pass


class GeoLookupError(ServiceError):
    """IP geolocation failed; never leaves the geolocation client."""
    pass
