"""Policy Resolver - Per-institution enrollment limits."""

from enrollgate.policy.exceptions import InvalidPolicyError, PolicyError
from enrollgate.policy.models import DEFAULT_POLICY, Policy
from enrollgate.policy.resolver import PolicyResolver, PolicySource

__all__ = [
    "DEFAULT_POLICY",
    "InvalidPolicyError",
    "Policy",
    "PolicyError",
    "PolicyResolver",
    "PolicySource",
]
