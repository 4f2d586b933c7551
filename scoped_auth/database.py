from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from scoped_auth.config import settings

_IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    # SQLite 連線預設只能在建立它的 thread 使用，FastAPI 的 sync endpoint 跑在 threadpool
    options: dict = {"connect_args": {"check_same_thread": False}}
    if url in _IN_MEMORY_SQLITE_URLS:
        # 記憶體資料庫每條連線都是獨立的 DB，必須共用同一條連線
        options["poolclass"] = StaticPool
    return options


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))
# autocommit=False：需手動呼叫 db.commit()，發生錯誤時可以 db.rollback()
# autoflush=False：不自動將暫存的變更送出到資料庫
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


# 所有模型繼承同一個 Base，Base.metadata 會追蹤所有資料表
class Base(DeclarativeBase):
    pass


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        # 無論成功或失敗都把連線釋放回連線池
        db.close()
