from collections.abc import Iterator

from psycopg.rows import dict_row

from scrubber.database.connection import get_connection
from scrubber.database.models import VersionRecord

_DELETED_VERSIONS_QUERY = """
    SELECT id, created, data_source, document_id, hash, status
    FROM data_sources_documents
    WHERE status = 'deleted'
"""


def _to_record(row: dict) -> VersionRecord:
    return VersionRecord(
        id=row["id"],
        source_id=row["data_source"],
        document_id=row["document_id"],
        created_at=row["created"],
        content_hash=row["hash"],
        status=row["status"],
    )


class VersionRepository:
    """Database operations for the data_sources_documents table."""

    def iter_deleted_versions(self, fetch_size: int = 1000) -> Iterator[VersionRecord]:
        """Stream deleted versions through a server-side cursor.

        Holds one pooled connection until the iterator is exhausted or closed.
        """
        with get_connection() as conn:
            with conn.cursor(name="deleted_versions", row_factory=dict_row) as cur:
                cur.itersize = fetch_size
                cur.execute(_DELETED_VERSIONS_QUERY)
                for row in cur:
                    yield _to_record(row)

    def list_deleted_versions(self) -> list[VersionRecord]:
        """Return every version with status = 'deleted' in one list.

        Convenience reader for small tables and tests; runs stream through
        iter_deleted_versions() instead.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(_DELETED_VERSIONS_QUERY)
                rows = cur.fetchall()
        return [_to_record(row) for row in rows]

    def has_live_version_with_hash(
        self,
        source_id: int,
        document_id: str,
        content_hash: str,
        not_before: int | None,
    ) -> bool:
        """Check whether a non-deleted version still references this content.

        Any status other than 'deleted' counts as live. When not_before is None
        the creation-time guard is dropped and any live match blocks the scrub.
        """
        sql = """
            SELECT id FROM data_sources_documents
            WHERE data_source = %s
              AND document_id = %s
              AND hash = %s
              AND status <> 'deleted'
        """
        params: tuple[object, ...] = (source_id, document_id, content_hash)
        if not_before is not None:
            sql += " AND created >= %s"
            params = (*params, not_before)
        sql += " LIMIT 1"

        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                row = cur.fetchone()
        return row is not None

    def purge_deleted_versions(
        self, source_id: int, document_id: str, content_hash: str
    ) -> int:
        """Delete the deleted rows of one (source, document, hash) triple.

        Active rows are never touched. Returns the number of rows removed.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    DELETE FROM data_sources_documents
                    WHERE data_source = %s
                      AND document_id = %s
                      AND hash = %s
                      AND status = 'deleted'
                    """,
                    (source_id, document_id, content_hash),
                )
                removed = cur.rowcount
            conn.commit()
        return removed
