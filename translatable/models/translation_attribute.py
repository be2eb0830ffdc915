from sqlalchemy import Column, Integer, String, Text, UniqueConstraint, Index

from translatable.core.db import Base


class TranslationAttribute(Base):
    """One locale's diff-only attribute overrides for one record."""
    __tablename__ = "translate_attributes"
    __table_args__ = (
        UniqueConstraint("locale", "model_id", "model_type", name="uq_translate_attributes_record_locale"),
        Index("ix_translate_attributes_record", "model_id", "model_type"),
    )

    id = Column(Integer, primary_key=True)
    locale = Column(String(16), nullable=False, index=True)
    model_id = Column(String(255), nullable=False)
    model_type = Column(String(255), nullable=False)
    attribute_data = Column(Text, nullable=True)  # JSON, ensure_ascii=False

    def __repr__(self) -> str:  # pragma: no cover
        return f"<TranslationAttribute {self.model_type}#{self.model_id} locale={self.locale}>"
