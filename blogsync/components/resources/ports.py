from blogsync.ports.gateway import GatewayPort, HttpError
from blogsync.ports.session import SessionReaderPort

__all__ = ["GatewayPort", "HttpError", "SessionReaderPort"]
