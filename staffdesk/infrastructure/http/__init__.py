"""REST collaborators: transport, auth gateway and authenticated API client."""

from .api_client import ApiClient
from .auth_gateway import HttpAuthGateway
from .transport import HttpTransport

__all__ = [
    "ApiClient",
    "HttpAuthGateway",
    "HttpTransport",
]
