"""Custom exceptions for the Policy Resolver."""


class PolicyError(Exception):
    """Base exception for policy errors."""


class InvalidPolicyError(PolicyError):
    """Policy value is outside its documented bounds."""
