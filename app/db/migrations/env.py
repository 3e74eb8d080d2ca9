from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

# config loads .env before anything reads DATABASE_URL
from app.core.config import DATABASE_URL
from app.db.base import Base

config = context.config

# alembic.ini leaves the URL blank; the app's setting wins
url = config.get_main_option("sqlalchemy.url") or DATABASE_URL
if not url:
    raise RuntimeError("DATABASE_URL is not configured")

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# SQLite cannot ALTER most constraints in place
RENDER_AS_BATCH = url.startswith("sqlite")


def run_migrations_offline():
    """Emit SQL to stdout instead of touching a database."""
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        render_as_batch=RENDER_AS_BATCH,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = create_engine(url, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=RENDER_AS_BATCH,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
