"""
Template Storage System

Persistent storage for RISEN templates and experiments using a single owned
aiosqlite connection. Sequence fields are stored as JSON text and decoded into
typed models when rows are read.
"""

import asyncio
import json
import os
import sqlite3
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple, Union

import aiosqlite
from pydantic import ValidationError

from risen.models.template import (
    SEQUENCE_FIELDS,
    Experiment,
    RatingSummary,
    RisenTemplate,
    decode_sequence,
    encode_sequence,
)
from risen.storage.defaults import DEFAULT_TEMPLATES
from risen.storage.pagination import Page
from risen.utils.errors import MalformedTemplateError, StorageError
from risen.utils.logging import get_logger

logger = get_logger(__name__)

MEMORY_DATABASE = ":memory:"

SCHEMA = """
CREATE TABLE IF NOT EXISTS templates (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    role TEXT,
    instructions TEXT,
    steps TEXT,          -- JSON array
    expectations TEXT,
    narrowing TEXT,
    variables TEXT,      -- JSON array
    tags TEXT,           -- JSON array
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    uses INTEGER DEFAULT 0,
    total_rating INTEGER DEFAULT 0,
    rating_count INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS experiments (
    id TEXT PRIMARY KEY,
    template_id TEXT,
    executed_prompt TEXT,
    variables_used TEXT,  -- JSON object
    ai_model TEXT,
    response TEXT,
    rating INTEGER,
    notes TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY(template_id) REFERENCES templates(id)
);

CREATE INDEX IF NOT EXISTS idx_templates_name ON templates(name);
CREATE INDEX IF NOT EXISTS idx_templates_usage ON templates(uses, rating_count);
CREATE INDEX IF NOT EXISTS idx_experiments_template ON experiments(template_id, created_at);
"""


class TemplateStore:
    """
    Storage adapter for the templates and experiments tables.

    Owns one connection for the life of the process. Use as an async context
    manager so the connection is closed on every exit path:

        async with TemplateStore(path) as store:
            await store.initialize()
    """

    def __init__(self, database_path: Union[str, Path]):
        self.database_path = str(database_path)
        self._db: Optional[aiosqlite.Connection] = None
        self._write_lock = asyncio.Lock()

    # Lifecycle

    async def open(self) -> "TemplateStore":
        if self._db is not None:
            return self

        if self.database_path != MEMORY_DATABASE:
            Path(self.database_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            # Autocommit mode; multi-statement writes use explicit transactions
            self._db = await aiosqlite.connect(self.database_path, isolation_level=None)
            self._db.row_factory = aiosqlite.Row
            await self._db.execute("PRAGMA foreign_keys=ON")
            await self._db.execute("PRAGMA busy_timeout=30000")
        except (sqlite3.Error, OSError) as e:
            await self.close()
            raise StorageError(f"Could not open database {self.database_path}: {e}", original_error=e)

        logger.info(f"Database connected: {self.database_path}")
        return self

    async def close(self) -> None:
        if self._db is None:
            return
        db, self._db = self._db, None
        try:
            await db.close()
            logger.info("Database closed")
        except sqlite3.Error as e:
            logger.error(f"Error closing database: {e}")

    async def __aenter__(self) -> "TemplateStore":
        return await self.open()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise StorageError("Template store is not open")
        return self._db

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Serialized write transaction with rollback on failure."""
        async with self._write_lock:
            db = self.db
            await db.execute("BEGIN IMMEDIATE")
            try:
                yield db
            except BaseException:
                await db.execute("ROLLBACK")
                raise
            await db.execute("COMMIT")

    async def initialize(self) -> None:
        """Create tables and indexes if they do not exist."""
        await self.db.executescript(SCHEMA)
        logger.info("Templates and experiments tables created/verified")

    async def seed_defaults(self, templates: Sequence[RisenTemplate] = DEFAULT_TEMPLATES) -> Tuple[int, int]:
        """
        Insert each default template whose name is not already taken.

        Returns (created, skipped). A failure on one template is logged and the
        remaining templates are still processed.
        """
        created = 0
        skipped = 0
        logger.info(f"Creating {len(templates)} default templates...")

        for template in templates:
            try:
                if await self.find_by_name(template.name) is None:
                    await self.create(template)
                    created += 1
                    logger.info(f"Created default template: {template.name}")
                else:
                    skipped += 1
                    logger.debug(f"Skipped existing template: {template.name}")
            except (sqlite3.Error, MalformedTemplateError) as e:
                logger.error(f'Failed to create default template "{template.name}": {e}')

        logger.info(f"Default templates processed: {created} created, {skipped} skipped")
        return created, skipped

    # Templates

    async def create(self, template: RisenTemplate) -> str:
        """Insert a new template with zeroed counters and return its id."""
        template_id = str(uuid.uuid4())

        async with self.transaction() as db:
            await db.execute("""
                INSERT INTO templates (
                    id, name, description, role, instructions, steps,
                    expectations, narrowing, variables, tags
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                template_id,
                template.name,
                template.description,
                template.role,
                template.instructions,
                encode_sequence(template.steps),
                template.expectations,
                template.narrowing,
                encode_sequence(template.variables),
                encode_sequence(template.tags),
            ))

        logger.debug(f"Stored template: {template_id}")
        return template_id

    async def get_by_id(self, template_id: str) -> Optional[RisenTemplate]:
        cursor = await self.db.execute("SELECT * FROM templates WHERE id = ?", (template_id,))
        row = await cursor.fetchone()
        return self._row_to_template(row) if row else None

    async def find_by_name(self, name: str) -> Optional[RisenTemplate]:
        cursor = await self.db.execute(
            "SELECT * FROM templates WHERE name = ? ORDER BY rowid LIMIT 1", (name,)
        )
        row = await cursor.fetchone()
        return self._row_to_template(row) if row else None

    async def search(
        self,
        query: Optional[str] = None,
        tags: Optional[List[str]] = None,
        min_rating: Optional[float] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Page[RisenTemplate]:
        """
        Filtered, paginated template listing.

        Ordered by uses, then rating count, both descending; total_count is
        the size of the filtered set before pagination.
        """
        offset = max(0, offset)
        limit = max(1, limit)
        conditions: List[str] = []
        params: List[Any] = []

        if query:
            conditions.append("(name LIKE ? OR description LIKE ? OR tags LIKE ?)")
            term = f"%{query}%"
            params.extend([term, term, term])

        if tags:
            # Structural membership in the stored JSON array
            tag_match = (
                "EXISTS (SELECT 1 FROM json_each("
                "CASE WHEN json_valid(templates.tags) THEN templates.tags ELSE '[]' END"
                ") WHERE json_each.value = ?)"
            )
            conditions.append("(" + " OR ".join([tag_match] * len(tags)) + ")")
            params.extend(tags)

        if min_rating:
            conditions.append("(CAST(total_rating AS REAL) / NULLIF(rating_count, 0)) >= ?")
            params.append(min_rating)

        where_clause = ("WHERE " + " AND ".join(conditions)) if conditions else ""

        cursor = await self.db.execute(f"SELECT COUNT(*) FROM templates {where_clause}", params)
        total_count = (await cursor.fetchone())[0]

        cursor = await self.db.execute(f"""
            SELECT * FROM templates
            {where_clause}
            ORDER BY uses DESC, rating_count DESC, rowid ASC
            LIMIT ? OFFSET ?
        """, [*params, limit, offset])
        rows = await cursor.fetchall()

        return Page(
            items=[self._row_to_template(row, lenient=True) for row in rows],
            total_count=total_count,
            offset=offset,
            limit=limit,
        )

    async def increment_use(self, template_id: str) -> Optional[int]:
        """Add one use and return the new count, or None if the template is missing."""
        async with self.transaction() as db:
            cursor = await db.execute(
                "UPDATE templates SET uses = uses + 1 WHERE id = ?", (template_id,)
            )
            if cursor.rowcount == 0:
                return None
            cursor = await db.execute("SELECT uses FROM templates WHERE id = ?", (template_id,))
            row = await cursor.fetchone()
        return row["uses"]

    async def record_rating(self, template_id: str, rating: int) -> Optional[RatingSummary]:
        """Add a rating to the template's aggregate and return the new aggregate."""
        async with self.transaction() as db:
            return await self._apply_rating(db, template_id, rating)

    # Experiments

    async def insert_experiment(self, experiment: Experiment) -> str:
        async with self.transaction() as db:
            return await self._insert_experiment(db, experiment)

    async def record_experiment(self, experiment: Experiment) -> Tuple[str, Optional[RatingSummary]]:
        """
        Store an experiment and fold its rating into the template aggregate.

        Insert, increment and the aggregate read happen in one transaction.
        """
        async with self.transaction() as db:
            experiment_id = await self._insert_experiment(db, experiment)
            summary = await self._apply_rating(db, experiment.template_id, experiment.rating)
        return experiment_id, summary

    async def experiments_for(self, template_id: str, offset: int = 0, limit: int = 10) -> Page[Experiment]:
        """Experiments of a template, newest first."""
        offset = max(0, offset)
        limit = max(1, limit)

        cursor = await self.db.execute(
            "SELECT COUNT(*) FROM experiments WHERE template_id = ?", (template_id,)
        )
        total_count = (await cursor.fetchone())[0]

        cursor = await self.db.execute("""
            SELECT * FROM experiments
            WHERE template_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ? OFFSET ?
        """, (template_id, limit, offset))
        rows = await cursor.fetchall()

        return Page(
            items=[self._row_to_experiment(row) for row in rows],
            total_count=total_count,
            offset=offset,
            limit=limit,
        )

    # Health

    async def health_check(self) -> Dict[str, Any]:
        """Database size, connectivity and row counts."""
        info: Dict[str, Any] = {
            "database_path": self.database_path,
            "database_exists": self.database_path == MEMORY_DATABASE or os.path.exists(self.database_path),
            "database_size_kb": 0.0,
            "connection_test": False,
        }

        if self.database_path != MEMORY_DATABASE and os.path.exists(self.database_path):
            info["database_size_kb"] = round(os.path.getsize(self.database_path) / 1024, 1)

        try:
            cursor = await self.db.execute("SELECT COUNT(*) FROM templates")
            info["template_count"] = (await cursor.fetchone())[0]
            cursor = await self.db.execute("SELECT COUNT(*) FROM experiments")
            info["experiment_count"] = (await cursor.fetchone())[0]
            info["connection_test"] = True
        except (sqlite3.Error, StorageError) as e:
            logger.error(f"Database health check failed: {e}")
            info["error"] = str(e)

        return info

    # Row conversion

    async def _insert_experiment(self, db: aiosqlite.Connection, experiment: Experiment) -> str:
        experiment_id = str(uuid.uuid4())
        await db.execute("""
            INSERT INTO experiments (
                id, template_id, executed_prompt, variables_used,
                ai_model, response, rating, notes
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            experiment_id,
            experiment.template_id,
            experiment.executed_prompt,
            json.dumps(experiment.variables_used),
            experiment.ai_model,
            experiment.response,
            experiment.rating,
            experiment.notes,
        ))
        logger.debug(f"Stored experiment {experiment_id} for template {experiment.template_id}")
        return experiment_id

    async def _apply_rating(
        self, db: aiosqlite.Connection, template_id: str, rating: int
    ) -> Optional[RatingSummary]:
        cursor = await db.execute("""
            UPDATE templates
            SET total_rating = total_rating + ?, rating_count = rating_count + 1
            WHERE id = ?
        """, (rating, template_id))
        if cursor.rowcount == 0:
            return None

        cursor = await db.execute(
            "SELECT total_rating, rating_count FROM templates WHERE id = ?", (template_id,)
        )
        row = await cursor.fetchone()
        return RatingSummary(total_rating=row["total_rating"], rating_count=row["rating_count"])

    def _row_to_template(self, row: aiosqlite.Row, lenient: bool = False) -> RisenTemplate:
        """
        Decode a templates row.

        With lenient=True (listing display), undecodable sequence fields become
        empty lists; otherwise they raise MalformedTemplateError. Any other
        invalid column raises MalformedTemplateError in both modes.
        """
        data = dict(row)
        try:
            return RisenTemplate.model_validate(data)
        except ValidationError as e:
            if not lenient:
                raise MalformedTemplateError(
                    f"Stored template {data.get('id')} is malformed: {e}",
                    original_error=e,
                )

        for name in SEQUENCE_FIELDS:
            try:
                decode_sequence(data.get(name))
            except ValueError as e:
                logger.warning(f"Template {data.get('id')} has malformed {name}, displaying as empty: {e}")
                data[name] = []
        try:
            return RisenTemplate.model_validate(data)
        except ValidationError as e:
            raise MalformedTemplateError(
                f"Stored template {data.get('id')} is malformed: {e}",
                original_error=e,
            )

    def _row_to_experiment(self, row: aiosqlite.Row) -> Experiment:
        data = dict(row)
        try:
            return Experiment.model_validate(data)
        except ValidationError as e:
            raise MalformedTemplateError(
                f"Stored experiment {data.get('id')} is malformed: {e}",
                field="variables_used",
                original_error=e,
            )
