from .collection_view import GROUP_MODE, LIST_MODE, CollectionView, ViewStorageKeys  # noqa: F401
from .app_catalog import AppCatalog  # noqa: F401

__all__ = ["CollectionView", "ViewStorageKeys", "LIST_MODE", "GROUP_MODE", "AppCatalog"]
