# scripts/process_recurring.py
"""
Roda o processamento de recorrências uma vez, sem passar pelo endpoint HTTP.

    python -m scripts.process_recurring
    python -m scripts.process_recurring --date 2024-03-15
"""
import argparse
import datetime
import json
import sys

from src.config import DEFAULT_CURRENCY, MAX_OCCURRENCES_PER_RUN
from src.core.db import get_supabase_client
from src.core.exceptions import FatalQueryError
from src.core.processor import process_recurring_transactions


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Gera as transações das recorrências vencidas.")
    parser.add_argument("--date", type=datetime.date.fromisoformat, default=None, help="Data de 'hoje' (AAAA-MM-DD).")
    parser.add_argument("--max-occurrences", type=int, default=MAX_OCCURRENCES_PER_RUN)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        summary = process_recurring_transactions(
            get_supabase_client(),
            today=args.date,
            fallback_currency=DEFAULT_CURRENCY,
            max_occurrences=args.max_occurrences,
        )
    except FatalQueryError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
