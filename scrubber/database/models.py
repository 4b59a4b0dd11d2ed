from dataclasses import dataclass

STATUS_ACTIVE = "active"
STATUS_DELETED = "deleted"


@dataclass(frozen=True)
class VersionRecord:
    """Represents a row from the data_sources_documents table."""

    id: int
    source_id: int
    document_id: str
    created_at: int
    content_hash: str
    status: str


@dataclass(frozen=True)
class SourceDescriptor:
    """Represents a row from the data_sources table."""

    id: int
    project_id: int
    internal_id: str
