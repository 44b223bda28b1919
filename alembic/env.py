import sys
from pathlib import Path
import os

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from logging.config import fileConfig
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool
from alembic import context
from app.models import Base
from dotenv import load_dotenv

# Pick up DATABASE_URL from .env in development
load_dotenv()

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# read DB URL directly (don't pass through configparser)
db_url = os.environ.get("DATABASE_URL")
if not db_url:
    raise RuntimeError("DATABASE_URL not set. Export it (or add in .env).")

# The app runs on asyncpg; migrations use the default sync driver:
# postgresql+asyncpg://...  ->  postgresql://...
sync_db_url = db_url.replace("+asyncpg", "")
if sync_db_url.startswith("postgres://"):
    sync_db_url = "postgresql://" + sync_db_url[len("postgres://"):]


def run_migrations_offline():
    """Run migrations in 'offline' mode.

    This configures the context with just a URL
    and not an Engine, though an Engine is still acceptable
    here as it will be used to render the SQL DDL statements
    to the script output.
    """
    context.configure(
        url=sync_db_url,
        target_metadata=Base.metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """Run migrations in 'online' mode.

    In this scenario, we need to create a synchronous Engine
    and associate a connection with the context.
    """
    connectable = create_engine(sync_db_url, poolclass=NullPool, future=True)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=Base.metadata, compare_type=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
