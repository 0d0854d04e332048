from __future__ import annotations

import hmac
from abc import ABC, abstractmethod
from enum import Enum


class Role(str, Enum):
    ANONYMOUS = "anonymous"
    CASHIER = "cashier"
    KITCHEN = "kitchen"


STAFF_ROLES = frozenset({Role.CASHIER, Role.KITCHEN})
CASHIER_ONLY = frozenset({Role.CASHIER})


class AccessGate(ABC):
    @abstractmethod
    def resolve_role(self, credential: str | None) -> Role:
        """Classifies an opaque credential into a role."""


class SharedSecretAccessGate(AccessGate):
    """Compares the credential against the cashier and kitchen secrets.

    An empty secret never matches, so an unconfigured role cannot be
    obtained by omitting the header.
    """

    def __init__(self, *, cashier_secret: str = "", kitchen_secret: str = "") -> None:
        self._cashier_secret = cashier_secret
        self._kitchen_secret = kitchen_secret

    def resolve_role(self, credential: str | None) -> Role:
        if not credential:
            return Role.ANONYMOUS
        if _matches(credential, self._cashier_secret):
            return Role.CASHIER
        if _matches(credential, self._kitchen_secret):
            return Role.KITCHEN
        return Role.ANONYMOUS


def _matches(credential: str, secret: str) -> bool:
    if not secret:
        return False
    return hmac.compare_digest(credential.encode(), secret.encode())
