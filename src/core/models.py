# src/core/models.py
import datetime
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from src.utils.date_utils import format_date, parse_date

# No Supabase as linhas chegam como dicionários. Estes modelos só dão forma
# (e validação) a esses dicionários dentro do processamento.

FREQUENCIES = ("daily", "weekly", "monthly", "yearly")

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"


def _optional_date(value: Any) -> Optional[datetime.date]:
    return parse_date(value) if value else None


def _optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


@dataclass(frozen=True)
class RecurringDefinition:
    """Uma linha de `recurring_transactions`: o modelo da transação + o progresso."""

    id: str
    user_id: str
    amount: float
    currency: str
    type: str
    frequency: str
    next_due_date: datetime.date
    execution_count: int = 0
    status: str = STATUS_ACTIVE
    category: Optional[str] = None
    description: Optional[str] = None
    recipient: Optional[str] = None
    is_chomesh: Optional[bool] = None
    day_of_month: Optional[int] = None
    total_occurrences: Optional[int] = None
    # Conversão travada no momento da criação/edição (nunca atualizada aqui)
    original_amount: Optional[float] = None
    original_currency: Optional[str] = None
    conversion_rate: Optional[float] = None
    conversion_date: Optional[datetime.date] = None
    rate_source: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "RecurringDefinition":
        frequency = row.get("frequency")
        if frequency not in FREQUENCIES:
            raise ValueError(f"Frequência inválida '{frequency}' na recorrência {row.get('id')}")
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            amount=float(row["amount"]),
            currency=row["currency"],
            type=row.get("type"),
            frequency=frequency,
            next_due_date=parse_date(row["next_due_date"]),
            execution_count=row.get("execution_count") or 0,
            status=row.get("status") or STATUS_ACTIVE,
            category=row.get("category"),
            description=row.get("description"),
            recipient=row.get("recipient"),
            is_chomesh=row.get("is_chomesh"),
            day_of_month=row.get("day_of_month"),
            total_occurrences=row.get("total_occurrences"),
            original_amount=_optional_float(row.get("original_amount")),
            original_currency=row.get("original_currency"),
            conversion_rate=_optional_float(row.get("conversion_rate")),
            conversion_date=_optional_date(row.get("conversion_date")),
            rate_source=row.get("rate_source"),
        )

    @property
    def has_locked_conversion(self) -> bool:
        return self.original_amount is not None and self.original_currency is not None


@dataclass(frozen=True)
class ExchangeRate:
    from_currency: str
    to_currency: str
    rate: float
    source: str


@dataclass(frozen=True)
class LedgerTransaction:
    """Linha de `transactions` gerada a partir de uma ocorrência."""

    user_id: str
    date: datetime.date
    amount: float
    currency: str
    type: str
    source_recurring_id: str
    occurrence_number: int
    description: Optional[str] = None
    category: Optional[str] = None
    recipient: Optional[str] = None
    is_chomesh: Optional[bool] = None
    original_amount: Optional[float] = None
    original_currency: Optional[str] = None
    conversion_rate: Optional[float] = None
    conversion_date: Optional[datetime.date] = None
    rate_source: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "date": format_date(self.date),
            "amount": self.amount,
            "currency": self.currency,
            "description": self.description,
            "type": self.type,
            "category": self.category,
            "is_chomesh": self.is_chomesh,
            "recipient": self.recipient,
            "source_recurring_id": self.source_recurring_id,
            "occurrence_number": self.occurrence_number,
            "original_amount": self.original_amount,
            "original_currency": self.original_currency,
            "conversion_rate": self.conversion_rate,
            "conversion_date": format_date(self.conversion_date) if self.conversion_date else None,
            "rate_source": self.rate_source,
        }


@dataclass(frozen=True)
class DefinitionResult:
    """Resultado do processamento de uma recorrência em uma execução."""

    id: str
    status: str  # processed | completed | deferred | unchanged | update_failed | conflict | error
    occurrences: int = 0
    skipped: int = 0

    @property
    def advanced(self) -> bool:
        return self.status in ("processed", "completed", "deferred")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "occurrences": self.occurrences,
            "skipped": self.skipped,
        }


@dataclass(frozen=True)
class RunSummary:
    processed: int = 0
    skipped: int = 0
    details: Tuple[DefinitionResult, ...] = field(default_factory=tuple)

    def with_result(self, result: DefinitionResult) -> "RunSummary":
        return replace(
            self,
            processed=self.processed + (1 if result.advanced else 0),
            skipped=self.skipped + result.skipped,
            details=self.details + (result,),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "skipped": self.skipped,
            "details": [result.to_dict() for result in self.details],
        }
