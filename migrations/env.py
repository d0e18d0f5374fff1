from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from recipeboard.config import database_url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def target_url():
    # Callers that build their own Config (tests) set the URL explicitly.
    return config.get_main_option("sqlalchemy.url") or database_url()


def run_migrations_offline():
    context.configure(url=target_url(), literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    engine = create_engine(target_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        # Each revision commits on its own so a failed step leaves earlier ones applied.
        context.configure(connection=connection, transaction_per_migration=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
