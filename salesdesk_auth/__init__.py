"""SalesDesk auth client.

Cookie-based refresh-token authentication for the SalesDesk API: in-memory
access token, single-flight refresh, authenticating transport and session
state machine.
"""

from .api.transport import ApiResponse, AuthTransport
from .application_context import AuthContext
from .auth_token import (
    AuthClient,
    Credentials,
    RefreshCoordinator,
    SessionController,
    SessionState,
    TokenStore,
    UserProfile,
)
from .config import ClientSettings, load_settings
from .routes import Navigator, is_protected_route, is_public_route

__all__ = [
    "ApiResponse",
    "AuthClient",
    "AuthContext",
    "AuthTransport",
    "ClientSettings",
    "Credentials",
    "Navigator",
    "RefreshCoordinator",
    "SessionController",
    "SessionState",
    "TokenStore",
    "UserProfile",
    "is_protected_route",
    "is_public_route",
    "load_settings",
]
