from logging.config import fileConfig

from alembic import context

from scoped_auth.database import Base, engine
from scoped_auth import models  # noqa: F401  # register tables on Base.metadata

config = context.config

if config.config_file_name is not None:
    # 不要停用 scoped_auth 已經建立的 logger
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL without a DB connection)."""
    context.configure(
        url=str(engine.url),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=engine.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against the application's engine."""
    # 共用 app 的 engine，in-memory SQLite (StaticPool) 才會看到同一個 DB
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
