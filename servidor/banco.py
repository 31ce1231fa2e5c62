import json
import logging
import os
import re
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from servidor import config

logger = logging.getLogger(__name__)


# --- FUNÇÕES UTILITÁRIAS ---
def garantir_diretorio(caminho):
    pasta = os.path.dirname(os.path.abspath(caminho))
    if not os.path.exists(pasta): os.makedirs(pasta, exist_ok=True)


def caminho_banco(caminho=None):
    return caminho or config.ARQ_SIMULADOS


# --- LIMPEZA PROFUNDA AO SALVAR ---
def normalizar_texto_para_banco(texto):
    if not texto: return ""
    txt = str(texto)

    # Remove caracteres de retorno de carro do Windows (\r)
    txt = txt.replace('\r\n', '\n').replace('\r', '\n')

    # Remove espaços em branco no fim e no início de cada linha
    txt = re.sub(r'[ \t]+\n', '\n', txt)
    txt = re.sub(r'\n[ \t]+', '\n', txt)

    # Colapsa 3 ou mais quebras de linha em apenas 2 (mantém parágrafo, sem buracos)
    txt = re.sub(r'\n{3,}', '\n\n', txt)

    return txt.strip()


def normalizar_para_comparacao(texto):
    if not texto: return ""
    texto_sem_tags = re.sub(r'<[^>]+>', '', str(texto))
    # Remove tudo que não for letra ou número: string "pura" para comparação
    return re.sub(r'[\W_]+', '', texto_sem_tags).lower().strip()


def alternativas_como_lista(alternativas):
    if isinstance(alternativas, dict):
        return [alternativas.get(letra, "") for letra in ("a", "b", "c", "d", "e")]
    if isinstance(alternativas, str):
        try:
            alternativas = json.loads(alternativas)
        except ValueError:
            return []
    if isinstance(alternativas, list):
        # "A) texto" guardado no banco vira "texto" para comparar
        return [re.sub(r'^\s*[A-Ea-e]\)\s*', '', str(a or "")) for a in alternativas]
    return []


def gerar_assinatura(q):
    alts = alternativas_como_lista(q.get('alternativas')) + ["", "", ""]
    return (
        normalizar_para_comparacao(q.get('pergunta')),
        normalizar_para_comparacao(alts[0]),
        normalizar_para_comparacao(alts[1]),
        normalizar_para_comparacao(alts[2])
    )


# --- CRUD BASE ---
def verificar_tabela(caminho=None):
    """Garante que a planilha e a aba de simulados existem. Retorna True se já existiam."""
    caminho = caminho_banco(caminho)
    garantir_diretorio(caminho)
    if not os.path.exists(caminho):
        wb = Workbook()
        ws = wb.active
        ws.title = config.ABA_SIMULADOS
        ws.append(config.COLUNAS_SIMULADOS)
        wb.save(caminho)
        logger.info("Planilha de simulados criada em %s", caminho)
        return False

    wb = load_workbook(caminho)
    if config.ABA_SIMULADOS not in wb.sheetnames:
        ws = wb.create_sheet(config.ABA_SIMULADOS, 0)
        ws.append(config.COLUNAS_SIMULADOS)
        wb.save(caminho)
        logger.info("Aba '%s' criada em %s", config.ABA_SIMULADOS, caminho)
        return False
    return True


def linha_para_questao(row):
    valores = list(row) + [None] * (len(config.COLUNAS_SIMULADOS) - len(row))
    q = dict(zip(config.COLUNAS_SIMULADOS, valores))
    try:
        q["alternativas"] = json.loads(q["alternativas"]) if q["alternativas"] else []
    except (TypeError, ValueError):
        q["alternativas"] = []
    q["ativo"] = bool(q["ativo"]) if q["ativo"] is not None else True
    return q


def carregar_questoes(caminho=None):
    caminho = caminho_banco(caminho)
    if not os.path.exists(caminho):
        return []

    try:
        wb = load_workbook(caminho)
    except (InvalidFileException, BadZipFile, KeyError, ValueError) as e:
        logger.warning("Arquivo Excel ilegível ou corrompido (%s)", e)
        return []

    if config.ABA_SIMULADOS not in wb.sheetnames:
        return []
    ws = wb[config.ABA_SIMULADOS]
    dados = []
    for row in ws.iter_rows(min_row=2, values_only=True):
        if not row or row[0] is None: continue
        dados.append(linha_para_questao(row))
    return dados


def salvar_questoes(dados, caminho=None):
    caminho = caminho_banco(caminho)
    garantir_diretorio(caminho)

    # Preserva outras abas que o operador tenha criado na planilha
    if os.path.exists(caminho):
        try:
            wb = load_workbook(caminho)
        except (InvalidFileException, BadZipFile, KeyError, ValueError):
            wb = Workbook()  # Arquivo corrompido: recomeça
    else:
        wb = Workbook()

    if config.ABA_SIMULADOS in wb.sheetnames:
        idx = wb.sheetnames.index(config.ABA_SIMULADOS)
        wb.remove(wb[config.ABA_SIMULADOS])
        ws = wb.create_sheet(config.ABA_SIMULADOS, idx)
    else:
        ws = wb.create_sheet(config.ABA_SIMULADOS, 0)

    # Remove a aba padrão "Sheet" que o Workbook() cria sozinho
    if "Sheet" in wb.sheetnames and len(wb.sheetnames) > 1:
        del wb["Sheet"]

    ws.append(config.COLUNAS_SIMULADOS)
    for q in dados:
        alternativas = [normalizar_texto_para_banco(a) for a in (q.get("alternativas") or [])]
        ws.append([
            q["id"], q.get("titulo", ""), q.get("descricao", ""), q.get("tipo", "teste"), q.get("materia_id"),
            normalizar_texto_para_banco(q.get("pergunta", "")), json.dumps(alternativas, ensure_ascii=False),
            q.get("correta", ""), q.get("dificuldade", config.NIVEL_PADRAO), q.get("total_questoes", 1),
            q.get("tempo_limite", 5), bool(q.get("ativo", True)), q.get("criado_em", "")
        ])

    wb.save(caminho)


def proximo_id(dados):
    ids = sorted([int(q["id"]) for q in dados if str(q["id"]).isdigit()])
    return 1 if not ids else (ids[-1] + 1)


def inserir_questoes(registros, caminho=None):
    dados = carregar_questoes(caminho)
    novo_id = proximo_id(dados)
    inseridos = []
    for registro in registros:
        nova = dict(registro)
        nova["id"] = novo_id
        novo_id += 1
        dados.append(nova)
        inseridos.append(nova)
    salvar_questoes(dados, caminho)
    logger.info("%d questão(ões) gravada(s) em %s", len(inseridos), caminho_banco(caminho))
    return inseridos


def remover_questao(id_questao, caminho=None):
    dados_atuais = carregar_questoes(caminho)
    novos_dados = [q for q in dados_atuais if str(q["id"]) != str(id_questao)]

    # Mesmo tamanho: não achou a questão (evita reescrever o arquivo à toa)
    if len(novos_dados) == len(dados_atuais):
        return False

    salvar_questoes(novos_dados, caminho)
    return True


def assinaturas_cadastradas(caminho=None):
    return {gerar_assinatura(q) for q in carregar_questoes(caminho)}
