from .registry import IndexDescriptor, IndexRegistry, collection_key

__all__ = ["IndexDescriptor", "IndexRegistry", "collection_key"]
