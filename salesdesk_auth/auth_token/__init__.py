"""Token lifecycle: store, refresh coordination, endpoint client and session."""

from .client import AuthClient
from .hook_manager import HookManager
from .profile_cache import ProfileCache
from .refresh_coordinator import RefreshCoordinator
from .session import SessionController
from .store import TokenStore
from .types import (
    AccountCreate,
    Credentials,
    EmailVerificationResponse,
    LoginResponse,
    OperationResponse,
    SavedIdentity,
    Session,
    SessionState,
    UserProfile,
)

__all__ = [
    "AccountCreate",
    "AuthClient",
    "Credentials",
    "EmailVerificationResponse",
    "HookManager",
    "LoginResponse",
    "OperationResponse",
    "ProfileCache",
    "RefreshCoordinator",
    "SavedIdentity",
    "Session",
    "SessionController",
    "SessionState",
    "TokenStore",
    "UserProfile",
]
