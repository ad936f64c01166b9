# guestlist/database/core/main.py
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import MetaData, create_engine, event, Column, Table
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from guestlist.common.logging import get_logger
from guestlist.common.settings import Settings, get_settings

logger = get_logger(__name__)

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

_serviceobject_first = ("id", "created_at", "updated_at", "deleted_at")


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    @classmethod
    def __table_cls__(cls, *args, **kw):
        """Reorder columns so ServiceObject fields come first."""
        if not args:
            return super().__table_cls__(*args, **kw)

        # Positional args are (name, metadata, *columns_and_constraints)
        name, metadata, *rest = args

        cols: List[Column] = [x for x in rest if isinstance(x, Column)]
        others = [x for x in rest if not isinstance(x, Column)]

        priority = {n: i for i, n in enumerate(_serviceobject_first)}
        original_index = {c: i for i, c in enumerate(cols)}

        cols.sort(key=lambda c: (priority.get(c.name, 10_000), original_index[c]))

        return Table(name, metadata, *(cols + others), **kw)


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite+pysqlite://") or ":memory:" in url or "mode=memory" in url


def build_engine(settings: Settings, url: Optional[str] = None) -> Engine:
    """
    Engine with bounded store calls:
      - Postgres: statement_timeout / lock_timeout on every connection
      - SQLite: busy timeout; in-memory URLs share one connection (StaticPool)
    """
    db_cfg = settings.db
    url = url or settings.database_url

    if url.startswith("sqlite"):
        kwargs = dict(
            echo=db_cfg.echo,
            future=True,
            connect_args={
                "timeout": max(db_cfg.lock_timeout_ms, 1) / 1000.0,
                "check_same_thread": False,
            },
        )
        if _is_memory_sqlite(url):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
        _install_sqlite_transaction_hooks(engine)
        return engine

    return create_engine(
        url,
        echo=db_cfg.echo,
        pool_size=db_cfg.pool_size,
        max_overflow=db_cfg.max_overflow,
        pool_timeout=db_cfg.pool_timeout_sec,
        pool_pre_ping=db_cfg.pool_pre_ping,
        pool_recycle=db_cfg.pool_recycle,
        isolation_level=db_cfg.isolation_level,
        connect_args={
            "options": f"-c statement_timeout={db_cfg.statement_timeout_ms} -c lock_timeout={db_cfg.lock_timeout_ms}",
        },
        future=True,
    )


def _install_sqlite_transaction_hooks(engine: Engine) -> None:
    """
    pysqlite defers BEGIN and mangles SAVEPOINT; take over transaction
    control so nested units of work roll back correctly. Also turn on FKs.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, _):
        dbapi_conn.isolation_level = None
        cur = dbapi_conn.cursor()
        try:
            cur.execute("PRAGMA foreign_keys=ON")
        finally:
            cur.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


class Database:
    """
    Explicit store handle: engine + session factory. Pass it (or sessions
    made from it) into the services instead of reaching for module globals,
    so tests and multiple stores can coexist in one process.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        settings: Optional[Settings] = None,
        engine: Optional[Engine] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.engine: Engine = engine or build_engine(self.settings, url)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False, future=True, autoflush=False)

    @property
    def url(self) -> str:
        return self.engine.url.render_as_string(hide_password=True)

    def session(self) -> Session:
        return self.SessionLocal()

    def create_all(self) -> None:
        # Importing the models registers their tables on Base.metadata
        import guestlist.database.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Created schema on %s", self.url)

    def drop_all(self) -> None:
        import guestlist.database.models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
