from .catalog_client import CatalogClient
from .documents_client import DocumentsClient

__all__ = ["CatalogClient", "DocumentsClient"]
