# src/core/recurrence.py
import datetime
from dataclasses import dataclass
from typing import Union

from src.core.models import STATUS_ACTIVE, STATUS_COMPLETED, RecurringDefinition
from src.utils.date_utils import add_months


def advance_due_date(current: datetime.date, frequency: str, day_of_month: Union[int, None] = None) -> datetime.date:
    """Próxima data de vencimento a partir de `current`, conforme a frequência."""
    if frequency == "daily":
        return current + datetime.timedelta(days=1)
    if frequency == "weekly":
        return current + datetime.timedelta(days=7)
    if frequency == "monthly":
        # Ancorado em day_of_month: dia 31 cai em 28/29/30 nos meses menores
        return add_months(current, 1, day_of_month)
    if frequency == "yearly":
        return add_months(current, 12)
    raise ValueError(f"Frequência inválida: {frequency}")


@dataclass(frozen=True)
class LoopState:
    next_due_date: datetime.date
    execution_count: int
    status: str

    @classmethod
    def from_definition(cls, definition: RecurringDefinition) -> "LoopState":
        return cls(definition.next_due_date, definition.execution_count, definition.status)


def is_due(state: LoopState, today: datetime.date) -> bool:
    return state.status == STATUS_ACTIVE and state.next_due_date <= today


def step(state: LoopState, definition: RecurringDefinition) -> LoopState:
    """Consome uma ocorrência (gerada ou pulada) e devolve o novo estado."""
    execution_count = state.execution_count + 1
    status = state.status
    if definition.total_occurrences and execution_count >= definition.total_occurrences:
        status = STATUS_COMPLETED
    return LoopState(
        next_due_date=advance_due_date(state.next_due_date, definition.frequency, definition.day_of_month),
        execution_count=execution_count,
        status=status,
    )
