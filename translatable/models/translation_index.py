from sqlalchemy import Column, Integer, String, Text, UniqueConstraint, Index

from translatable.core.db import Base


class TranslationIndex(Base):
    """Scalar copy of one indexed translated attribute, used by filters and sorts."""
    __tablename__ = "translate_indexes"
    __table_args__ = (
        UniqueConstraint("locale", "model_id", "model_type", "item", name="uq_translate_indexes_record_item"),
        Index("ix_translate_indexes_lookup", "model_type", "locale", "item"),
        Index("ix_translate_indexes_record", "model_id", "model_type"),
    )

    id = Column(Integer, primary_key=True)
    locale = Column(String(16), nullable=False)
    model_id = Column(String(255), nullable=False)
    model_type = Column(String(255), nullable=False)
    item = Column(String(255), nullable=False)  # attribute name
    value = Column(Text, nullable=True)
