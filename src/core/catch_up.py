# src/core/catch_up.py
import datetime
import sys
from dataclasses import dataclass, replace

from supabase import Client

from src.config import MAX_OCCURRENCES_PER_RUN
from src.core import db
from src.core.exchange_rates import RateResolver
from src.core.materializer import materialize
from src.core.models import RecurringDefinition
from src.core.recurrence import LoopState, is_due, step


@dataclass(frozen=True)
class CatchUpResult:
    state: LoopState
    occurrences: int = 0
    skipped: int = 0
    deferred: bool = False


def catch_up(
    supabase_client: Client,
    definition: RecurringDefinition,
    today: datetime.date,
    default_currency: str,
    resolver: RateResolver,
    max_occurrences: int = MAX_OCCURRENCES_PER_RUN,
) -> CatchUpResult:
    """
    Gera todas as ocorrências vencidas de uma recorrência, uma por vez, em ordem.
    Uma ocorrência pulada (sem câmbio ou falha no insert) também consome sua vaga:
    ela não é tentada de novo em execuções futuras.
    """
    state = LoopState.from_definition(definition)
    occurrences = 0
    skipped = 0

    while is_due(state, today) and occurrences < max_occurrences:
        current = replace(definition, next_due_date=state.next_due_date, execution_count=state.execution_count)
        transaction = materialize(current, state.next_due_date, default_currency, today, resolver)

        if transaction is None:
            skipped += 1
        elif not db.add_transaction(supabase_client, transaction.to_row()):
            print(
                f"ERROR: [SKIPPED] Recorrência {definition.id}: falha ao inserir a ocorrência "
                f"{transaction.occurrence_number} ({state.next_due_date}).",
                file=sys.stderr,
            )
            skipped += 1

        state = step(state, definition)
        occurrences += 1

    deferred = is_due(state, today)
    if deferred:
        print(
            f"DEBUG: Recorrência {definition.id} atingiu o limite de {max_occurrences} ocorrências; "
            f"restante fica para a próxima execução (próxima: {state.next_due_date})."
        )
    return CatchUpResult(state=state, occurrences=occurrences, skipped=skipped, deferred=deferred)
