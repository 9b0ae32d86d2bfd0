# rollcall/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models in the Rollcall service.
    """
    pass


# Import ORM models so that Base.metadata is aware of them
# This import should stay at the bottom to avoid circular dependencies.
import rollcall.models.class_batch  # noqa: E402,F401
import rollcall.models.session  # noqa: E402,F401
