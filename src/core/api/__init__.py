from src.core.api.base import ApiTransport
from src.core.api.media_server import MediaServerClient

__all__ = [
    "ApiTransport",
    "MediaServerClient",
]
