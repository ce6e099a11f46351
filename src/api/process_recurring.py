# src/api/process_recurring.py
import sys
import traceback

from flask import Response, current_app, jsonify, request

from src.core.auth import authorize_request
from src.core.exceptions import AuthError, FatalQueryError
from src.core.processor import process_recurring_transactions


def process_recurring_view():
    """Endpoint chamado pelo cron. Autoriza, processa as recorrências e devolve o resumo."""
    try:
        authorize_request(request.headers.get("Authorization"), current_app.config["TOKEN_VALIDATORS"])
    except AuthError as e:
        return jsonify({"error": e.message}), e.status_code

    try:
        summary = process_recurring_transactions(
            current_app.config["SUPABASE_CLIENT"],
            fallback_currency=current_app.config["DEFAULT_CURRENCY"],
            max_occurrences=current_app.config["MAX_OCCURRENCES_PER_RUN"],
        )
    except FatalQueryError as e:
        print(f"ERROR: Erro fatal no processamento de recorrências: {e}", file=sys.stderr)
        return Response(str(e), status=500)
    except Exception as e:
        print(f"ERROR: Erro inesperado no processamento de recorrências: {e}", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        return Response(str(e), status=500)

    return jsonify(summary.to_dict()), 200


def health_view():
    return jsonify({"status": "ok"}), 200
