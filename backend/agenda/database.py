import logging
import time

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool

from .config import settings

logger = logging.getLogger(__name__)

APP_ENV = settings.APP_ENV.lower()  # "dev" | "prod"


def _make_engine():
    # En desarrollo: sin pool -> la conexión se cierra después de cada request
    if APP_ENV != "prod":
        return create_engine(
            settings.DB_URL,
            future=True,
            pool_pre_ping=True,
            poolclass=NullPool,
        )

    # En producción: pool pequeño y prudente
    return create_engine(
        settings.DB_URL,
        future=True,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=5,
        pool_recycle=1800,
    )


def install_slow_query_logging(target_engine, threshold: float) -> None:
    """Registra en WARNING las sentencias que tardan más de `threshold` segundos."""
    if threshold <= 0:
        return

    @event.listens_for(target_engine, "before_cursor_execute")
    def _before_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(target_engine, "after_cursor_execute")
    def _after_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
        total = time.time() - conn.info["query_start_time"].pop(-1)
        if total > threshold:
            logger.warning(f"Query lenta ({total:.2f}s): {statement[:200]}...")


engine = _make_engine()
install_slow_query_logging(engine, settings.DB_SLOW_QUERY_THRESHOLD)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()  # importante para liberar la conexión
