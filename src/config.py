# src/config.py
import os
from dotenv import load_dotenv

load_dotenv()

# Configurações do Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")

# Chave opcional usada pelo cron para chamar o endpoint (além da service role key)
RECURRING_API_KEY = os.getenv("RECURRING_API_KEY")

# Moeda usada quando o perfil do usuário não define uma
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "ILS")

# Timeout (segundos) de cada tentativa em um provedor de câmbio
RATE_REQUEST_TIMEOUT = float(os.getenv("RATE_REQUEST_TIMEOUT", "10"))

# Limite de ocorrências por recorrência em uma única execução
MAX_OCCURRENCES_PER_RUN = int(os.getenv("MAX_OCCURRENCES_PER_RUN", "366"))
