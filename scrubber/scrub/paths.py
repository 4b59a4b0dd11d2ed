from blake3 import blake3


def document_id_digest(document_id: str) -> str:
    """BLAKE3 hex digest of a document id, as used by the ingestion write path."""
    return blake3(document_id.encode("utf-8")).hexdigest()


def resolve_prefix(
    project_id: int | str, internal_id: str, document_id: str, content_hash: str
) -> str:
    """Build blob path prefix: {project}/{internal_id}/{digest(document_id)}/{hash}

    The write path stores a version's files beneath this prefix as a
    directory ({hash}/content.txt, {hash}/document.json), never at the
    prefix itself. Callers list with a trailing "/" so hash "h1" cannot
    match the objects of hash "h12".
    """
    return f"{project_id}/{internal_id}/{document_id_digest(document_id)}/{content_hash}"
