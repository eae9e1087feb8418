from .transport import ApiResponse, AuthTransport, RequestContext

__all__ = ["ApiResponse", "AuthTransport", "RequestContext"]
