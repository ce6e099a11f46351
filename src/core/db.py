# src/core/db.py
import datetime
import sys
from typing import Any, Dict, List

from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from src.config import DEFAULT_CURRENCY, SUPABASE_ANON_KEY, SUPABASE_SERVICE_ROLE_KEY, SUPABASE_URL
from src.core.exceptions import FatalQueryError
from src.core.recurrence import LoopState
from src.utils.date_utils import format_date

UNIQUE_VIOLATION = "23505"


def get_supabase_client() -> Client:
    """Retorna o cliente Supabase com a service role key (ignora RLS)."""
    return create_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)


def get_supabase_client_for_token(token: str) -> Client:
    """Cliente que faz as requisições com o token de quem chamou (usado para validar o token)."""
    return create_client(
        SUPABASE_URL,
        SUPABASE_ANON_KEY or SUPABASE_SERVICE_ROLE_KEY,
        options=ClientOptions(headers={"Authorization": f"Bearer {token}"}),
    )


# --- Funções para Recorrências ---
def get_due_recurring_transactions(supabase_client: Client, today: datetime.date) -> List[Dict[str, Any]]:
    """Obtém as recorrências ativas com next_due_date <= hoje. Qualquer erro aborta a execução."""
    try:
        response = (
            supabase_client.table("recurring_transactions")
            .select("*")
            .eq("status", "active")
            .lte("next_due_date", format_date(today))
            .execute()
        )
        return response.data or []
    except Exception as e:
        print(f"ERROR: Erro ao obter recorrências vencidas do Supabase: {e}", file=sys.stderr)
        raise FatalQueryError(f"Erro ao obter recorrências vencidas: {e}") from e


def update_recurring_progress(
    supabase_client: Client, recurring_id: str, previous_next_due_date: datetime.date, state: LoopState
) -> str:
    """
    Grava (execution_count, next_due_date, status) da recorrência.
    O update só acontece se next_due_date ainda for o valor lido no início da execução;
    se outra execução já avançou a recorrência, retorna 'conflict'.
    Retorna 'updated', 'conflict' ou 'failed'.
    """
    try:
        response = (
            supabase_client.table("recurring_transactions")
            .update(
                {
                    "execution_count": state.execution_count,
                    "next_due_date": format_date(state.next_due_date),
                    "status": state.status,
                }
            )
            .eq("id", recurring_id)
            .eq("next_due_date", format_date(previous_next_due_date))
            .execute()
        )
    except Exception as e:
        print(f"ERROR: Erro ao atualizar a recorrência {recurring_id}: {e}", file=sys.stderr)
        return "failed"

    if not response.data:
        print(
            f"WARNING: Recorrência {recurring_id} já foi avançada por outra execução "
            f"(next_due_date diferente de {previous_next_due_date}).",
            file=sys.stderr,
        )
        return "conflict"
    return "updated"


def probe_recurring_access(supabase_client: Client) -> None:
    """Leitura inofensiva usada para confirmar que um token é aceito pelo Supabase."""
    supabase_client.table("recurring_transactions").select("id").limit(1).execute()


# --- Funções para Transações ---
def add_transaction(supabase_client: Client, row: Dict[str, Any]) -> bool:
    """
    Insere a transação gerada por uma ocorrência.
    Se a ocorrência (source_recurring_id, occurrence_number) já existe, considera sucesso.
    """
    try:
        supabase_client.table("transactions").insert(row).execute()
        return True
    except APIError as e:
        if e.code == UNIQUE_VIOLATION:
            print(
                f"DEBUG: Ocorrência {row.get('occurrence_number')} da recorrência "
                f"{row.get('source_recurring_id')} já existe, mantendo a existente."
            )
            return True
        print(f"ERROR: Erro ao adicionar transação ao Supabase: {e}", file=sys.stderr)
        return False
    except Exception as e:
        print(f"ERROR: Erro ao adicionar transação ao Supabase: {e}", file=sys.stderr)
        return False


# --- Funções para Perfis ---
def get_default_currency(supabase_client: Client, user_id: str, fallback: str = DEFAULT_CURRENCY) -> str:
    """Moeda padrão do usuário. Sem perfil (ou sem moeda definida) usa `fallback`."""
    response = supabase_client.table("profiles").select("default_currency").eq("id", user_id).limit(1).execute()
    if response.data and response.data[0].get("default_currency"):
        return response.data[0]["default_currency"]
    return fallback
