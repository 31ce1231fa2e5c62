import os

# --- CONFIGURAÇÕES ---
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DB_DIR = os.environ.get("SIMULADO_DB_DIR", os.path.join(BASE_DIR, "../banco_de_dados"))
ARQ_SIMULADOS = os.environ.get("SIMULADO_ARQ_SIMULADOS", os.path.join(DB_DIR, "simulados.xlsx"))
UPLOAD_TMP_DIR = os.environ.get("SIMULADO_UPLOAD_TMP_DIR", os.path.join(DB_DIR, "tmp"))

ABA_SIMULADOS = "simulados"
COLUNAS_SIMULADOS = ["id", "titulo", "descricao", "tipo", "materia_id", "pergunta", "alternativas", "correta",
                     "dificuldade", "total_questoes", "tempo_limite", "ativo", "criado_em"]

# Blocos menores que isso na divisão por "1)", "2)"... são ruído (índice, cabeçalho)
TAMANHO_MINIMO_FRAGMENTO = int(os.environ.get("SIMULADO_TAMANHO_MINIMO_FRAGMENTO", "50"))
TAMANHO_MAXIMO_HTML = int(os.environ.get("SIMULADO_TAMANHO_MAXIMO_HTML", str(2_000_000)))

POR_PAGINA = 50
NIVEL_PADRAO = "Médio"
EXTENSOES_TEXTO = {"html", "htm", "txt"}
EXTENSOES_PDF = {"pdf"}

LOG_LEVEL = os.environ.get("SIMULADO_LOG_LEVEL", "INFO").upper()
