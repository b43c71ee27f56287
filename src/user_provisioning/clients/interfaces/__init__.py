from .identity_provider import (
    ActiveIdentity,
    CallerSession,
    IdentityResult,
    IIdentityProvider,
    PendingIdentity,
    SessionInfo,
)

__all__ = [
    "ActiveIdentity",
    "CallerSession",
    "IdentityResult",
    "IIdentityProvider",
    "PendingIdentity",
    "SessionInfo",
]
