"""SQLAlchemy declarative base shared by all survey_db ORM models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
