"""Sequence management for record ID generation.

Provides sequential ID generation with format: {ABBREV}-{SEQUENCE}
Example: DOC-00001, COM-00042

Dialect-neutral via SQLAlchemy Core; the increment uses an atomic upsert on
PostgreSQL and SELECT + UPDATE/INSERT elsewhere.
"""

from sqlalchemy import text
from sqlalchemy.engine import Connection


class SequenceService:
    """Manages per-resource sequences stored in the ``_sequences`` table."""

    def __init__(self, conn: Connection):
        """Initialize the sequence service.

        Args:
            conn: An open SQLAlchemy connection. Commits are issued on it.
        """
        self.conn = conn
        self.dialect = conn.dialect.name
        self._ensure_table()

    def _ensure_table(self) -> None:
        """Create the sequences table if it doesn't exist."""
        self.conn.execute(text("""
            CREATE TABLE IF NOT EXISTS _sequences (
                resource TEXT NOT NULL PRIMARY KEY,
                next_value INTEGER NOT NULL DEFAULT 1
            )
        """))
        self.conn.commit()

    def next_id(self, resource_name: str, abbreviation: str) -> str:
        """Generate the next ID for a resource.

        Returns:
            Formatted ID like "DOC-00001"
        """
        sequence_value = self._get_and_increment(resource_name)

        # Format: ABBREV-NNNNN (5 digits, zero-padded)
        return f"{abbreviation}-{sequence_value:05d}"

    def _get_and_increment(self, resource_name: str) -> int:
        """Get the next sequence value and increment atomically."""
        if self.dialect == "postgresql":
            return self._get_and_increment_postgresql(resource_name)
        return self._get_and_increment_generic(resource_name)

    def _get_and_increment_generic(self, resource_name: str) -> int:
        """SELECT + UPDATE/INSERT pattern."""
        row = self.conn.execute(
            text("SELECT next_value FROM _sequences WHERE resource = :resource"),
            {"resource": resource_name},
        ).fetchone()

        if row:
            current_value = row[0]
            self.conn.execute(
                text("""
                    UPDATE _sequences
                    SET next_value = next_value + 1
                    WHERE resource = :resource
                """),
                {"resource": resource_name},
            )
        else:
            # Insert new sequence starting at 1
            current_value = 1
            self.conn.execute(
                text("""
                    INSERT INTO _sequences (resource, next_value)
                    VALUES (:resource, 2)
                """),
                {"resource": resource_name},
            )

        self.conn.commit()
        return current_value

    def _get_and_increment_postgresql(self, resource_name: str) -> int:
        """INSERT ... ON CONFLICT DO UPDATE RETURNING.

        RETURNING gives the value that was current before the increment.
        """
        row = self.conn.execute(
            text("""
                INSERT INTO _sequences (resource, next_value)
                VALUES (:resource, 2)
                ON CONFLICT (resource) DO UPDATE
                    SET next_value = _sequences.next_value + 1
                RETURNING next_value - 1 AS current_value
            """),
            {"resource": resource_name},
        ).fetchone()
        self.conn.commit()

        if row is None:
            raise RuntimeError("Sequence upsert returned no rows")
        return row[0]

    def current_value(self, resource_name: str) -> int:
        """Get the current sequence value without incrementing.

        Returns 0 if no sequence exists yet.
        """
        row = self.conn.execute(
            text("SELECT next_value - 1 FROM _sequences WHERE resource = :resource"),
            {"resource": resource_name},
        ).fetchone()
        if row is None:
            return 0
        return row[0]
