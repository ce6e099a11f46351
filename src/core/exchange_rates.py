# src/core/exchange_rates.py
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import requests

from src.config import RATE_REQUEST_TIMEOUT
from src.core.models import ExchangeRate


@dataclass(frozen=True)
class RateProvider:
    name: str
    build_url: Callable[[str, str], str]
    parse_rate: Callable[[Any, str, str], Any]


def _rates_table(payload: Any, _from: str, to: str) -> Any:
    # Formato {"rates": {"ILS": 3.7, ...}}
    if not isinstance(payload, dict):
        return None
    rates = payload.get("rates")
    return rates.get(to) if isinstance(rates, dict) else None


def _floatrates(payload: Any, _from: str, to: str) -> Any:
    # Formato {"ils": {"rate": 3.7, ...}, ...}
    if not isinstance(payload, dict):
        return None
    entry = payload.get(to.lower())
    return entry.get("rate") if isinstance(entry, dict) else None


# Ordem = prioridade. O primeiro que responder com uma taxa válida vence.
RATE_PROVIDERS: List[RateProvider] = [
    RateProvider(
        name="exchangerate-api",
        build_url=lambda from_, to: f"https://api.exchangerate-api.com/v4/latest/{from_}",
        parse_rate=_rates_table,
    ),
    RateProvider(
        name="frankfurter",
        build_url=lambda from_, to: f"https://api.frankfurter.app/latest?from={from_}&symbols={to}",
        parse_rate=_rates_table,
    ),
    RateProvider(
        name="floatrates",
        build_url=lambda from_, to: f"https://www.floatrates.com/daily/{from_.lower()}.json",
        parse_rate=_floatrates,
    ),
]


def _valid_rate(value: Any) -> Union[float, None]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value <= 0:
        return None
    return float(value)


class RateResolver:
    """
    Busca a taxa de câmbio percorrendo os provedores em ordem.
    Uma instância vive durante uma execução: todas as ocorrências da execução
    usam a data de hoje, então a taxa de um par é buscada uma única vez.
    """

    def __init__(self, providers: Optional[List[RateProvider]] = None, timeout: float = RATE_REQUEST_TIMEOUT):
        self.providers = list(providers) if providers is not None else list(RATE_PROVIDERS)
        self.timeout = timeout
        self._cache: Dict[Tuple[str, str], Optional[ExchangeRate]] = {}

    def resolve(self, from_currency: str, to_currency: str) -> Optional[ExchangeRate]:
        """Retorna a taxa (4 casas decimais) ou None se todos os provedores falharem."""
        if from_currency == to_currency:
            return ExchangeRate(from_currency, to_currency, 1.0, "identity")

        key = (from_currency, to_currency)
        if key not in self._cache:
            self._cache[key] = self._fetch(from_currency, to_currency)
        return self._cache[key]

    def _fetch(self, from_currency: str, to_currency: str) -> Optional[ExchangeRate]:
        for provider in self.providers:
            print(f"DEBUG: Tentando provedor '{provider.name}' para {from_currency} -> {to_currency}")
            try:
                response = requests.get(provider.build_url(from_currency, to_currency), timeout=self.timeout)
                response.raise_for_status()
                rate = _valid_rate(provider.parse_rate(response.json(), from_currency, to_currency))
            except (requests.exceptions.RequestException, ValueError, TypeError, AttributeError, KeyError) as e:
                print(f"WARNING: Provedor '{provider.name}' falhou: {e}", file=sys.stderr)
                continue

            if rate is None:
                print(
                    f"WARNING: Provedor '{provider.name}' não retornou taxa para {from_currency} -> {to_currency}",
                    file=sys.stderr,
                )
                continue

            rounded = round(rate, 4)
            print(f"DEBUG: Taxa obtida de '{provider.name}': {from_currency} -> {to_currency} = {rounded}")
            return ExchangeRate(from_currency, to_currency, rounded, provider.name)

        print(f"ERROR: Todos os provedores falharam para {from_currency} -> {to_currency}", file=sys.stderr)
        return None
