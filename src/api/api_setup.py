# src/api/api_setup.py
from flask import Flask

from src.api.process_recurring import health_view, process_recurring_view
from src.core.auth import ExactKeyValidator, ServiceRoleProbeValidator
from src.core.db import get_supabase_client_for_token

PROCESS_RECURRING_PATH = "/process-recurring-transactions"


def setup_api(config: dict) -> Flask:
    """
    Configura a aplicação Flask (rotas e dependências).
    Retorna o app pronto para ser servido por um servidor WSGI (Gunicorn).
    """
    app = Flask(__name__)

    # Dependências ficam no app.config para as views acessarem via current_app
    app.config["SUPABASE_CLIENT"] = config["SUPABASE_CLIENT"]
    app.config["DEFAULT_CURRENCY"] = config["DEFAULT_CURRENCY"]
    app.config["MAX_OCCURRENCES_PER_RUN"] = config["MAX_OCCURRENCES_PER_RUN"]
    app.config["TOKEN_VALIDATORS"] = [
        ExactKeyValidator(config["API_KEYS"]),
        ServiceRoleProbeValidator(config.get("TOKEN_CLIENT_FACTORY", get_supabase_client_for_token)),
    ]

    # O cron da plataforma pode chamar tanto a rota nomeada quanto a raiz
    app.add_url_rule(PROCESS_RECURRING_PATH, "process_recurring", process_recurring_view, methods=["POST"])
    app.add_url_rule("/", "process_recurring_root", process_recurring_view, methods=["POST"])
    app.add_url_rule("/health", "health", health_view, methods=["GET"])

    print("DEBUG: API de recorrências configurada. Pronta para ser rodada pelo WSGI.")
    return app
