from blogsync.ports.gateway import GatewayPort, HttpError
from blogsync.ports.storage import CredentialStoreError, CredentialStorePort

__all__ = ["CredentialStoreError", "CredentialStorePort", "GatewayPort", "HttpError"]
