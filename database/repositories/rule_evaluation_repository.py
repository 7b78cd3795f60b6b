from datetime import datetime
from database.models.rule_evaluation import RuleEvaluation
from database.repositories.base_repository import BaseRepository


class RuleEvaluationRepository(BaseRepository[RuleEvaluation]):
    """
    Retention access to rule evaluations; the rows themselves come from the rules engine.
    """
    def __init__(self, engine=None):
        super().__init__(model_class=RuleEvaluation, engine=engine)

    def delete_older_than(self, cutoff: datetime) -> int:
        """Delete evaluations recorded before the cutoff."""
        return self.delete_where(RuleEvaluation.timestamp < cutoff)
