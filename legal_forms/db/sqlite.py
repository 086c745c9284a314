"""SQLite document store"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

from legal_forms.db.base import DocumentStore
from legal_forms.errors import StoreError
from legal_forms.models.document import GeneratedDocument

logger = logging.getLogger(__name__)

_COLUMNS = "id, template_id, template_name, file_name, data, created_at, updated_at, pdf_url, status"


class SQLiteDocumentStore(DocumentStore):
    """Documents in one SQLite table; the data record is stored as JSON"""

    def __init__(self, database_path: str):
        self.database_path = Path(database_path)
        self.init_db()

    @contextmanager
    def get_connection(self):
        """Get a database connection as context manager"""
        try:
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.database_path))
        except (OSError, sqlite3.Error) as e:
            raise StoreError(f"Cannot open database {self.database_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"Database error: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_db(self) -> None:
        with self.get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS generated_documents (
                    id TEXT PRIMARY KEY,
                    template_id TEXT NOT NULL,
                    template_name TEXT NOT NULL,
                    file_name TEXT NOT NULL,
                    data TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP,
                    pdf_url TEXT,
                    status TEXT NOT NULL DEFAULT 'draft'
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_documents_template
                ON generated_documents(template_id)
            """)

    @staticmethod
    def _row_to_document(row: sqlite3.Row) -> GeneratedDocument:
        record = dict(row)
        record["data"] = json.loads(record["data"])
        return GeneratedDocument.model_validate(record)

    def load(self, document_id: str) -> Optional[GeneratedDocument]:
        with self.get_connection() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM generated_documents WHERE id = ?",
                (document_id,),
            ).fetchone()
        return self._row_to_document(row) if row else None

    def save(self, document: GeneratedDocument) -> None:
        try:
            data = json.dumps(document.data, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StoreError(f"Cannot serialize document {document.id}: {e}") from e
        with self.get_connection() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO generated_documents ({_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    document.id,
                    document.template_id,
                    document.template_name,
                    document.file_name,
                    data,
                    document.created_at.isoformat(),
                    document.updated_at.isoformat() if document.updated_at else None,
                    document.pdf_url,
                    document.status.value,
                ),
            )
        logger.debug(f"Saved document {document.id} ({document.status.value})")

    def list(self) -> List[GeneratedDocument]:
        with self.get_connection() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM generated_documents ORDER BY created_at, id"
            ).fetchall()
        return [self._row_to_document(row) for row in rows]

    def delete(self, document_id: str) -> bool:
        with self.get_connection() as conn:
            cursor = conn.execute("DELETE FROM generated_documents WHERE id = ?", (document_id,))
            return cursor.rowcount > 0
