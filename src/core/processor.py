# src/core/processor.py
import datetime
import sys
import traceback
from typing import Any, Dict, Union

from supabase import Client

from src.config import DEFAULT_CURRENCY, MAX_OCCURRENCES_PER_RUN
from src.core import db
from src.core.catch_up import catch_up
from src.core.exchange_rates import RateResolver
from src.core.models import STATUS_COMPLETED, DefinitionResult, RecurringDefinition, RunSummary
from src.utils.date_utils import utc_today


def process_definition(
    supabase_client: Client,
    row: Dict[str, Any],
    today: datetime.date,
    resolver: RateResolver,
    fallback_currency: str = DEFAULT_CURRENCY,
    max_occurrences: int = MAX_OCCURRENCES_PER_RUN,
) -> DefinitionResult:
    """Processa uma recorrência vencida e grava o novo progresso dela."""
    definition = RecurringDefinition.from_row(row)
    default_currency = db.get_default_currency(supabase_client, definition.user_id, fallback_currency)

    result = catch_up(supabase_client, definition, today, default_currency, resolver, max_occurrences)
    if result.occurrences == 0:
        return DefinitionResult(definition.id, "unchanged")

    outcome = db.update_recurring_progress(supabase_client, definition.id, definition.next_due_date, result.state)
    if outcome == "updated":
        if result.state.status == STATUS_COMPLETED:
            status = "completed"
        elif result.deferred:
            status = "deferred"
        else:
            status = "processed"
    elif outcome == "conflict":
        status = "conflict"
    else:
        # O progresso desta execução se perde; a próxima reprocessa o mesmo intervalo
        status = "update_failed"
    return DefinitionResult(definition.id, status, result.occurrences, result.skipped)


def process_recurring_transactions(
    supabase_client: Client,
    today: Union[datetime.date, None] = None,
    resolver: Union[RateResolver, None] = None,
    fallback_currency: str = DEFAULT_CURRENCY,
    max_occurrences: int = MAX_OCCURRENCES_PER_RUN,
) -> RunSummary:
    """
    Gera as transações de todas as recorrências vencidas.
    Só uma falha ao buscar as recorrências (FatalQueryError) interrompe a execução;
    erros em uma recorrência são registrados e as demais seguem normalmente.
    """
    today = today or utc_today()
    resolver = resolver or RateResolver()
    print(f"DEBUG: Iniciando processamento de recorrências para {today}.")

    rows = db.get_due_recurring_transactions(supabase_client, today)
    if not rows:
        print("DEBUG: Nenhuma recorrência vencida.")
        return RunSummary()

    print(f"DEBUG: {len(rows)} recorrências vencidas encontradas.")
    summary = RunSummary()
    for row in rows:
        try:
            result = process_definition(supabase_client, row, today, resolver, fallback_currency, max_occurrences)
        except Exception as e:
            print(f"ERROR: Erro ao processar a recorrência {row.get('id')}: {e}", file=sys.stderr)
            traceback.print_exc(file=sys.stderr)
            result = DefinitionResult(row.get("id"), "error")
        summary = summary.with_result(result)

    print(
        f"[SUMMARY] Processadas: {summary.processed}, Ocorrências puladas: {summary.skipped}, "
        f"Total vencidas: {len(rows)}"
    )
    return summary
