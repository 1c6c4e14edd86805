# menova/models/__init__.py
from menova.db.session import Base, engine

# Import model modules so SQLAlchemy registers all mappers.
from . import user  # noqa: F401
from . import symptom_sample  # noqa: F401
from . import conversation  # noqa: F401
from . import message  # noqa: F401
from . import daily_goal  # noqa: F401


def init_db() -> None:
    """Create tables if they don't exist."""
    Base.metadata.create_all(bind=engine)
