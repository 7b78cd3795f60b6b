import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Text, Boolean, DateTime, Index, Uuid
from database.models.base import Base, JsonPayload


class RuleEvaluation(Base):
    """Written by the rules engine; this service only prunes it."""
    __tablename__ = 'rule_evaluations'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    rule_id = Column(Text, nullable=False)
    triggered = Column(Boolean, nullable=False)
    evaluation_data = Column(JsonPayload)
    timestamp = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index('idx_rule_evaluations_timestamp', 'timestamp'),
    )
