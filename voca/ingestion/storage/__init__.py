"""Document and blob storage backends."""

from voca.ingestion.storage.document_store import (
    BaseDocumentStore,
    DocumentSnapshot,
    MemoryDocumentStore,
    RedisDocumentStore,
    split_document_path,
)
from voca.ingestion.storage.blob_store import (
    BaseBlobStore,
    BlobMetadata,
    MemoryBlobStore,
    S3BlobStore,
)

__all__ = [
    "BaseDocumentStore",
    "DocumentSnapshot",
    "MemoryDocumentStore",
    "RedisDocumentStore",
    "split_document_path",
    "BaseBlobStore",
    "BlobMetadata",
    "MemoryBlobStore",
    "S3BlobStore",
]
