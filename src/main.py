# src/main.py
from dotenv import load_dotenv
import sys
import traceback

from src import config as settings
from src.api.api_setup import setup_api
from src.core.db import get_supabase_client

print("DEBUG: Iniciando src/main.py (Execução Global)")

# --- Setup da Aplicação no Escopo Global (Executado apenas uma vez ao carregar o módulo) ---
try:
    load_dotenv()
    print("DEBUG: Variáveis de ambiente carregadas.")

    supabase_client = get_supabase_client()
    print("DEBUG: Cliente Supabase (service role) inicializado.")

    config = {
        "SUPABASE_CLIENT": supabase_client,
        "API_KEYS": [settings.SUPABASE_SERVICE_ROLE_KEY, settings.RECURRING_API_KEY],
        "DEFAULT_CURRENCY": settings.DEFAULT_CURRENCY,
        "MAX_OCCURRENCES_PER_RUN": settings.MAX_OCCURRENCES_PER_RUN,
    }
    print(f"DEBUG: Configurações da API criadas: {config.keys()}")

    # A variável wsgi_app é a que o Gunicorn serve (src.main:wsgi_app)
    wsgi_app = setup_api(config)
    print("DEBUG: Variável wsgi_app definida como a aplicação Flask. Aplicação WSGI pronta.")

except Exception as e:
    # Este bloco pega erros na inicialização GLOBAL do módulo
    print(f"ERROR: Erro crítico durante a inicialização em src/main.py: {e}", file=sys.stderr)
    traceback.print_exc(file=sys.stderr)
    raise
