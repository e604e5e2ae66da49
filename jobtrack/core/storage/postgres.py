"""
PostgreSQL job store implementation.

Uses SQLAlchemy with async support for database operations.
Provides connection pooling, session management and the job store
contract on top of the job_run and job_log tables.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import select, text
from sqlalchemy import update as sa_update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from jobtrack.core.config.loader import get_config
from jobtrack.core.storage.base import (
    JOB_LOG_COLLECTION,
    JOB_RUN_COLLECTION,
    BaseJobStore,
    DatabaseConfig,
    FieldUpdate,
)
from jobtrack.core.storage.exceptions import (
    ConfigurationError,
    ConnectionError,
    DuplicateError,
    StorageError,
    UnknownCollectionError,
)
from jobtrack.core.utils.time import utcnow_naive

logger = logging.getLogger(__name__)

# Document fields whose column attribute is named differently
_FIELD_TO_ATTR = {"metadata": "meta"}
_ATTR_TO_FIELD = {v: k for k, v in _FIELD_TO_ATTR.items()}


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Database:
    """
    PostgreSQL connection pool using SQLAlchemy async.

    Usage:
        db = Database(config)
        await db.connect()

        async with db.session() as session:
            result = await session.execute(text("SELECT 1"))
            row = result.scalar()

        await db.disconnect()
    """

    def __init__(self, config: DatabaseConfig):
        """Initialize database with configuration."""
        self.config = config
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def build_url(self) -> str:
        """Build database connection URL."""
        return (
            f"postgresql+asyncpg://{self.config.user}:{self.config.password}"
            f"@{self.config.host}:{self.config.port}/{self.config.database}"
        )

    async def connect(self) -> None:
        """Establish connection pool to the database."""
        if self._engine is not None:
            return

        try:
            url = self.build_url()
            self._engine = create_async_engine(
                url,
                pool_size=self.config.pool_size,
                max_overflow=self.config.pool_max_overflow,
                echo=self.config.echo,
            )
            self._session_factory = async_sessionmaker(
                self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            logger.info(
                f"Connected to PostgreSQL at {self.config.host}:{self.config.port}"
            )
        except Exception as e:
            raise ConnectionError(f"Failed to connect to PostgreSQL: {e}") from e

    async def disconnect(self) -> None:
        """Close all database connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Disconnected from PostgreSQL")

    async def health_check(self) -> bool:
        """Check if database is reachable by executing a simple query."""
        if self._engine is None:
            return False

        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"PostgreSQL health check failed: {e}")
            return False

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a transactional session scope.

        Usage:
            async with db.session() as session:
                result = await session.execute(query)
                await session.commit()
        """
        if self._session_factory is None:
            raise ConnectionError("Database not connected. Call connect() first.")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """Create all tables defined in models."""
        if self._engine is None:
            raise ConnectionError("Database not connected. Call connect() first.")

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created")

    async def drop_tables(self) -> None:
        """Drop all tables. Use with caution."""
        if self._engine is None:
            raise ConnectionError("Database not connected. Call connect() first.")

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            logger.info("Database tables dropped")


def _model_for(collection: str) -> type[Base]:
    """Resolve the table model backing a collection."""
    # Imported here: the models module needs Base from this module
    from jobtrack.core.models.job_runs import JobLog, JobRun

    models: dict[str, type[Base]] = {
        JOB_RUN_COLLECTION: JobRun,
        JOB_LOG_COLLECTION: JobLog,
    }
    try:
        return models[collection]
    except KeyError:
        raise UnknownCollectionError(f"No table for collection: {collection}") from None


def _to_row(document: dict[str, Any]) -> dict[str, Any]:
    """Translate document field names into model attribute names."""
    return {_FIELD_TO_ATTR.get(k, k): v for k, v in document.items()}


def _to_document(row: Base) -> dict[str, Any]:
    """Translate a model instance into a plain document."""
    document: dict[str, Any] = {}
    for attr in sa_inspect(type(row)).column_attrs:
        document[_ATTR_TO_FIELD.get(attr.key, attr.key)] = getattr(row, attr.key)
    if "id" in document:
        document["id"] = str(document["id"])
    return document


def _where(model: type[Base], fields: dict[str, Any]) -> list[Any]:
    return [getattr(model, _FIELD_TO_ATTR.get(k, k)) == v for k, v in fields.items()]


class PostgresJobStore(BaseJobStore):
    """
    Job store backed by PostgreSQL.

    Usage:
        store = PostgresJobStore(Database(config))
        await store.connect()

        await store.upsert("job_run", id_where(job_id), {"name": "reindex", ...})
    """

    def __init__(self, db: Database):
        """Initialize with a database (connected lazily on connect())."""
        self.db = db

    async def connect(self) -> None:
        await self.db.connect()

    async def disconnect(self) -> None:
        await self.db.disconnect()

    async def health_check(self) -> bool:
        return await self.db.health_check()

    async def upsert(
        self, collection: str, key: dict[str, Any], document: dict[str, Any]
    ) -> None:
        """Insert the row or update it in place (INSERT ... ON CONFLICT DO UPDATE)."""
        model = _model_for(collection)
        values = _to_row({**document, **key})
        changes = _to_row(document)
        if "updated_at" in model.__table__.c:
            changes["updated_at"] = utcnow_naive()

        stmt = (
            pg_insert(model)
            .values(**values)
            .on_conflict_do_update(index_elements=list(key), set_=changes)
        )
        try:
            async with self.db.session() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Upsert into {collection} failed: {e}") from e

    async def update_fields(
        self, collection: str, key: dict[str, Any], update: FieldUpdate
    ) -> int:
        """Apply increments and overwrites in a single UPDATE statement."""
        model = _model_for(collection)
        if update.is_empty:
            return 0

        values: dict[str, Any] = {}
        for name, amount in update.inc.items():
            column = getattr(model, _FIELD_TO_ATTR.get(name, name))
            values[column.key] = column + amount
        values.update(_to_row(update.set))
        if "updated_at" in model.__table__.c:
            values["updated_at"] = utcnow_naive()

        stmt = sa_update(model).where(*_where(model, key)).values(**values)
        try:
            async with self.db.session() as session:
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Update of {collection} failed: {e}") from e

        return result.rowcount

    async def insert(self, collection: str, document: dict[str, Any]) -> str:
        model = _model_for(collection)
        row = model(**_to_row(document))
        try:
            async with self.db.session() as session:
                session.add(row)
                await session.commit()
                await session.refresh(row)
        except IntegrityError as e:
            raise DuplicateError(f"Record already exists in {collection}") from e
        except SQLAlchemyError as e:
            raise StorageError(f"Insert into {collection} failed: {e}") from e

        return str(row.id)

    async def get(self, collection: str, key: dict[str, Any]) -> dict[str, Any] | None:
        model = _model_for(collection)
        async with self.db.session() as session:
            result = await session.execute(select(model).where(*_where(model, key)))
            row = result.scalar_one_or_none()
            return _to_document(row) if row is not None else None

    async def find(
        self, collection: str, where: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        model = _model_for(collection)
        stmt = select(model).where(*_where(model, where or {})).order_by(model.created_at)
        async with self.db.session() as session:
            result = await session.execute(stmt)
            return [_to_document(row) for row in result.scalars().all()]


def load_database_config() -> DatabaseConfig:
    """Load database configuration from config files."""
    config = get_config()
    postgres_config = config.get("postgres", {})

    if not postgres_config:
        raise ConfigurationError("PostgreSQL configuration not found")

    return DatabaseConfig(
        host=postgres_config.get("host", "localhost"),
        port=int(postgres_config.get("port", 5432)),
        database=postgres_config.get("database", "jobtrack"),
        user=postgres_config.get("user", "jobtrack"),
        password=postgres_config.get("password", "jobtrack"),
        pool_size=int(postgres_config.get("pool_size", 5)),
        pool_max_overflow=int(postgres_config.get("pool_max_overflow", 10)),
        echo=postgres_config.get("echo", False),
    )
