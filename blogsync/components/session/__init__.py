"""
Session component - Sign-in, registration, profile and sign-out.

Owns the identity lifecycle and the persisted session credential.
"""

from .component import (
    SessionManager,
    parse_credential,
    validate_login,
    validate_registration,
)
from .models import (
    LoginInput,
    RegisterInput,
    SessionOutput,
    SessionPhase,
    UpdateProfileInput,
)
from .ports import CredentialStorePort, GatewayPort

__all__ = [
    # Component
    "SessionManager",
    # Pure functions
    "parse_credential",
    "validate_login",
    "validate_registration",
    # Models
    "LoginInput",
    "RegisterInput",
    "SessionOutput",
    "SessionPhase",
    "UpdateProfileInput",
    # Ports
    "CredentialStorePort",
    "GatewayPort",
]
