"""PolicyResolver - Resolves an institution's policy with documented defaults."""

from __future__ import annotations

import logging
from typing import Protocol

from enrollgate.policy.models import DEFAULT_POLICY, Policy

logger = logging.getLogger(__name__)


class PolicySource(Protocol):
    """Anything that can look up an explicit policy row."""

    def get_policy(self, institution_id: str) -> Policy | None:
        """Return the stored policy, or None when the institution has none."""
        ...


class PolicyResolver:
    """Resolves the policy in force for an institution.

    Policies are read-only here; administrative updates go through the
    state store.
    """

    def __init__(self, default: Policy = DEFAULT_POLICY) -> None:
        """Initialize the resolver.

        Args:
            default: Policy returned when an institution has no explicit row.
        """
        self.default = default

    def resolve(self, source: PolicySource, institution_id: str) -> Policy:
        """Resolve the policy for an institution.

        Args:
            source: Policy lookup, usually an open repository transaction.
            institution_id: The institution's unique ID.

        Returns:
            The explicit policy, or the default when none exists.
        """
        policy = source.get_policy(institution_id)
        if policy is None:
            logger.debug("No policy for institution %s, using defaults", institution_id)
            return self.default
        return policy
