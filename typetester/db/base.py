"""Declarative base shared by all typetester models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
