# src/core/materializer.py
import datetime
import sys
from typing import Union

from src.core.exchange_rates import RateResolver
from src.core.models import LedgerTransaction, RecurringDefinition


def materialize(
    definition: RecurringDefinition,
    due_date: datetime.date,
    default_currency: str,
    today: datetime.date,
    resolver: RateResolver,
) -> Union[LedgerTransaction, None]:
    """
    Monta a transação de uma ocorrência da recorrência.
    Retorna None quando a ocorrência deve ser pulada (sem taxa de câmbio disponível).

    1. Conversão travada na recorrência: reaproveita os dados como estão, sem buscar taxa.
    2. Mesma moeda do usuário: copia valor e moeda, sem dados de conversão.
    3. Moeda estrangeira sem conversão travada: converte com a taxa de hoje.
    """
    base = dict(
        user_id=definition.user_id,
        date=due_date,
        type=definition.type,
        description=definition.description,
        category=definition.category,
        recipient=definition.recipient,
        is_chomesh=definition.is_chomesh,
        source_recurring_id=definition.id,
        occurrence_number=definition.execution_count + 1,
    )

    if definition.has_locked_conversion:
        # `amount` já está na moeda padrão (convertido quando a recorrência foi salva)
        return LedgerTransaction(
            amount=definition.amount,
            currency=default_currency,
            original_amount=definition.original_amount,
            original_currency=definition.original_currency,
            conversion_rate=definition.conversion_rate,
            conversion_date=definition.conversion_date,
            rate_source=definition.rate_source,
            **base,
        )

    if definition.currency == default_currency:
        return LedgerTransaction(amount=definition.amount, currency=definition.currency, **base)

    exchange_rate = resolver.resolve(definition.currency, default_currency)
    if exchange_rate is None:
        print(
            f"ERROR: [SKIPPED] Recorrência {definition.id}: sem taxa para "
            f"{definition.currency} -> {default_currency}, ocorrência {due_date} pulada.",
            file=sys.stderr,
        )
        return None

    # A data da conversão é a da execução, mesmo para ocorrências atrasadas
    return LedgerTransaction(
        amount=round(definition.amount * exchange_rate.rate, 2),
        currency=default_currency,
        original_amount=definition.amount,
        original_currency=definition.currency,
        conversion_rate=exchange_rate.rate,
        conversion_date=today,
        rate_source="auto",
        **base,
    )
