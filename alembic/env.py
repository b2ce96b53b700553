from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool, create_engine

from cleanserve.core.config import settings
from cleanserve.db.session import Base

# Every model module must be imported so its table lands in Base.metadata
from cleanserve.models import (  # noqa: F401
    user, address, service, service_package, spare_part, referral_campaign,
    referral, booking, quotation, quotation_item, order_status_log, sms_log,
)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# The app's DATABASE_URL wins over anything in alembic.ini
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


def run_offline() -> None:
    """Emit SQL to stdout without a live connection (``alembic upgrade --sql``)."""
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )


def run_online() -> None:
    engine = create_engine(config.get_main_option("sqlalchemy.url"), poolclass=pool.NullPool)
    with engine.connect() as connection:
        _configure(connection=connection)


if context.is_offline_mode():
    run_offline()
else:
    run_online()
