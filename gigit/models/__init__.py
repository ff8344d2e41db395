"""
Models module - SQLAlchemy table definitions.

These classes describe the relational schema only; request/response
shapes live in gigit.schemas.
"""

from gigit.models.tables import Base

__all__ = ["Base"]
