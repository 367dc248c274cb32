import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship

# Define naming conventions for constraints and indexes
# https://alembic.sqlalchemy.org/en/latest/naming.html
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)
Base = declarative_base(metadata=metadata)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _localized(value, language: str, fallback: str) -> str:
    if isinstance(value, dict) and value:
        return value.get(language) or value.get("en") or next(iter(value.values())) or fallback
    return value or fallback


class Survey(Base):
    __tablename__ = "surveys"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(JSON, nullable=False) # {"en": "English Name", "ko": "Korean Name"}
    description = Column(JSON, nullable=True)
    category = Column(String(64), nullable=False, default="personality")
    language = Column(String(10), nullable=False, default="en")
    questions_json = Column(JSON, nullable=False, default=list)
    analysis_json = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    estimated_time = Column(Integer, nullable=True) # minutes
    base_id = Column(String(64), nullable=True)
    external_url = Column(String(512), nullable=True)
    is_external = Column(Boolean, nullable=False, default=False)
    survey_types = Column(JSON, nullable=True) # {"simple": {"questions": 10, "time": 3}, ...}
    difficulty = Column(String(16), nullable=False, default="medium")
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    results = relationship("Result", back_populates="survey")

    __table_args__ = (
        Index("ix_surveys_category_language", "category", "language"),
        Index("ix_surveys_is_active_language", "is_active", "language"),
    )

    def localized_name(self, language: str = "en") -> str:
        return _localized(self.name, language, "Untitled Survey")

    def localized_description(self, language: str = "en") -> str:
        return _localized(self.description, language, "")

    def to_definition_data(self) -> dict:
        """Raw mapping accepted by services.scoring_engine.loader.load_survey_definition."""
        return {
            "id": str(self.id),
            "name": self.name,
            "isExternal": bool(self.is_external),
            "externalUrl": self.external_url,
            "questionsJson": self.questions_json,
            "analysisJson": self.analysis_json,
        }


class Result(Base):
    __tablename__ = "results"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=True)
    survey_id = Column(Uuid(as_uuid=True), ForeignKey("surveys.id"), nullable=False)
    answers_json = Column(JSON, nullable=False)
    results_json = Column(JSON, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    time_spent = Column(Integer, nullable=True, default=0) # seconds
    is_completed = Column(Boolean, nullable=False, default=True)
    session_id = Column(String(64), nullable=True)

    survey = relationship("Survey", back_populates="results")

    __table_args__ = (
        Index("ix_results_user_id_survey_id", "user_id", "survey_id"),
        Index("ix_results_completed_at", "completed_at"),
        Index("ix_results_session_id", "session_id"),
    )
