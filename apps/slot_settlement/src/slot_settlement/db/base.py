"""SQLAlchemy base metadata and model registration utilities."""

from importlib import import_module

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


def import_orm_models() -> None:
    """Import ORM models so metadata is fully populated."""

    modules = (
        "slot_settlement.db.models.participant",
        "slot_settlement.db.models.slot_transfer",
        "slot_settlement.db.models.settlement_batch",
        "slot_settlement.db.models.settlement_pairing",
        "slot_settlement.db.models.batch_transfer",
    )
    for module_name in modules:
        import_module(module_name)
