from psycopg.rows import dict_row

from scrubber.database.connection import get_connection
from scrubber.database.models import SourceDescriptor
from scrubber.scrub.exceptions import SourceNotFoundError


class SourceRepository:
    """Database operations for the data_sources table."""

    def get_source(self, source_id: int) -> SourceDescriptor:
        """Find a data source by ID.

        Raises:
            SourceNotFoundError: if no data source with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, project, internal_id
                    FROM data_sources
                    WHERE id = %s
                    """,
                    (source_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise SourceNotFoundError(f"Could not find data source {source_id}")

        return SourceDescriptor(
            id=row["id"],
            project_id=row["project"],
            internal_id=row["internal_id"],
        )
