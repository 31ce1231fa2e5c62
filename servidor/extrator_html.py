import logging
import re

from servidor import config

logger = logging.getLogger(__name__)

LETRAS = ("a", "b", "c", "d", "e")

# "A) Red" é a menor alternativa aceita no texto puro; abaixo disso é sujeira
TAMANHO_MINIMO_ALTERNATIVA = 6

RE_TAG = re.compile(r'<[^>]*>')

# --- SEGMENTAÇÃO ---
RE_ABERTURA_DIV_QUESTAO = re.compile(
    r'<div[^>]*class=["\'](?:[^"\']*\s)?questao(?:\s[^"\']*)?["\'][^>]*>', re.IGNORECASE)
RE_TAG_DIV = re.compile(r'<div\b[^>]*>|</div\s*>', re.IGNORECASE)
# Só no início de linha ou depois de espaço/tag: "f(2)" e o "2)" de "12)" não cortam
RE_INICIO_NUMERADO = re.compile(r'(?:^|(?<=[\s>]))(?=\d+\))', re.MULTILINE)

# --- ENUNCIADO ---
RE_PERGUNTA_NEGRITO = re.compile(
    r'<(?:strong|b)>\s*\d+\)\s*</(?:strong|b)>\s*(.+?)(?=<ul|<li|<p>|<em>|A\)|Resposta:)', re.DOTALL)
RE_PERGUNTA_PARAGRAFO = re.compile(r'<p[^>]*>\s*\d+\)\s*(.+?)</p>', re.DOTALL)
RE_PERGUNTA_TEXTO = re.compile(r'^\s*\d+\)\s*(.+?)(?=\n|<|A\)|B\)|Resposta:)', re.DOTALL)

# --- ALTERNATIVAS ---
RE_ALTERNATIVA_LI = re.compile(r'<li[^>]*>\s*([A-E])\)\s*(.+?)</li>', re.DOTALL)
RE_ALTERNATIVA_P = re.compile(r'<p[^>]*>\s*([A-E])\)\s*(.+?)</p>', re.DOTALL)
RE_ALTERNATIVA_TEXTO = re.compile(
    r'(?<![A-Za-z0-9])([A-E])\)\s*(.+?)(?=(?<![A-Za-z0-9])[A-E]\)|(?i:Resposta|Gabarito):|$)', re.DOTALL)

# --- GABARITO ---
# (?![a-z]) evita pegar o "A" de "Alternativa"
RE_RESPOSTA_BLOCO = re.compile(
    r'<(?:p|em)[^>]*>\s*(?:<em>)?\s*(?:Resposta|Gabarito):\s*([A-E])(?![a-z])\s*(?:</em>)?', re.IGNORECASE)
RE_RESPOSTA_TEXTO = re.compile(r'(?:Resposta|Gabarito):\s*([A-E])(?![a-z])', re.IGNORECASE)


def remover_tags(texto, substituto=''):
    return RE_TAG.sub(substituto, texto)


def limpar_captura(texto):
    limpo = remover_tags(texto).strip()
    return limpo or None


# --- ESTRATÉGIAS DE SEGMENTAÇÃO ---
def segmentar_por_div_questao(html):
    fragmentos = []
    pos = 0
    while True:
        abertura = RE_ABERTURA_DIV_QUESTAO.search(html, pos)
        if not abertura:
            break

        # Conta <div> internos para achar o </div> que fecha a questão
        profundidade = 1
        fechamento = None
        for tag in RE_TAG_DIV.finditer(html, abertura.end()):
            profundidade += -1 if tag.group(0).startswith("</") else 1
            if profundidade == 0:
                fechamento = tag
                break
        if fechamento is None:
            break

        fragmentos.append(html[abertura.end():fechamento.start()])
        pos = fechamento.end()
    return fragmentos


def segmentar_por_numeracao(html):
    blocos = RE_INICIO_NUMERADO.split(html)
    return [b for b in blocos if len(b.strip()) > config.TAMANHO_MINIMO_FRAGMENTO]


def segmentar_blob_inteiro(html):
    # Último recurso: o conteúdo inteiro pode ser exatamente uma questão
    return [html] if html.strip() else []


ESTRATEGIAS_SEGMENTACAO = (segmentar_por_div_questao, segmentar_por_numeracao, segmentar_blob_inteiro)


def segmentar(html):
    for estrategia in ESTRATEGIAS_SEGMENTACAO:
        fragmentos = estrategia(html)
        if fragmentos:
            logger.debug("[DEBUG - SEGMENTAÇÃO] %d fragmento(s) via %s", len(fragmentos), estrategia.__name__)
            return fragmentos
    return []


# --- ESTRATÉGIAS DO ENUNCIADO ---
def pergunta_apos_numero_em_negrito(fragmento):
    m = RE_PERGUNTA_NEGRITO.search(fragmento)
    return limpar_captura(m.group(1)) if m else None


def pergunta_em_paragrafo_numerado(fragmento):
    m = RE_PERGUNTA_PARAGRAFO.search(fragmento)
    return limpar_captura(m.group(1)) if m else None


def pergunta_em_texto_numerado(fragmento):
    m = RE_PERGUNTA_TEXTO.search(fragmento)
    return limpar_captura(m.group(1)) if m else None


ESTRATEGIAS_PERGUNTA = (pergunta_apos_numero_em_negrito, pergunta_em_paragrafo_numerado, pergunta_em_texto_numerado)


# --- ESTRATÉGIAS DAS ALTERNATIVAS ---
# Cada uma só preenche letras ainda vazias: quem chega primeiro fica
def alternativas_em_itens_de_lista(fragmento, alternativas):
    for m in RE_ALTERNATIVA_LI.finditer(fragmento):
        texto = limpar_captura(m.group(2))
        if texto:
            alternativas.setdefault(m.group(1).lower(), texto)
    return alternativas


def alternativas_em_paragrafos(fragmento, alternativas):
    for m in RE_ALTERNATIVA_P.finditer(fragmento):
        texto = limpar_captura(m.group(2))
        if texto:
            alternativas.setdefault(m.group(1).lower(), texto)
    return alternativas


def alternativas_em_texto_puro(fragmento, alternativas):
    texto_limpo = remover_tags(fragmento, ' ')
    for m in RE_ALTERNATIVA_TEXTO.finditer(texto_limpo):
        letra = m.group(1)
        texto = m.group(2).strip()
        if len(f"{letra}) {texto}") < TAMANHO_MINIMO_ALTERNATIVA:
            continue
        alternativas.setdefault(letra.lower(), texto)
    return alternativas


ESTRATEGIAS_ALTERNATIVAS = (alternativas_em_itens_de_lista, alternativas_em_paragrafos, alternativas_em_texto_puro)


# --- ESTRATÉGIAS DO GABARITO ---
def resposta_em_bloco_destacado(fragmento):
    m = RE_RESPOSTA_BLOCO.search(fragmento)
    return m.group(1).lower() if m else None


def resposta_em_texto(fragmento):
    m = RE_RESPOSTA_TEXTO.search(fragmento)
    return m.group(1).lower() if m else None


ESTRATEGIAS_RESPOSTA = (resposta_em_bloco_destacado, resposta_em_texto)


def primeira_correspondencia(estrategias, fragmento):
    for estrategia in estrategias:
        valor = estrategia(fragmento)
        if valor:
            logger.debug("[DEBUG - CAPTURA] %s resolvido via %s", estrategia.__name__.split("_")[0], estrategia.__name__)
            return valor
    return None


def extrair_questao(fragmento, numero=1):
    pergunta = primeira_correspondencia(ESTRATEGIAS_PERGUNTA, fragmento)
    if not pergunta:
        logger.debug("[DEBUG - DESCARTADA] Fragmento %d -> enunciado não encontrado", numero)
        return None

    alternativas = {}
    for estrategia in ESTRATEGIAS_ALTERNATIVAS:
        if len(alternativas) >= len(LETRAS):
            break
        antes = len(alternativas)
        estrategia(fragmento, alternativas)
        if len(alternativas) > antes:
            logger.debug("[DEBUG - CAPTURA] %d alternativa(s) via %s", len(alternativas) - antes, estrategia.__name__)

    if sorted(alternativas) != list(LETRAS):
        logger.debug("[DEBUG - DESCARTADA] Fragmento %d -> %d alternativa(s) encontrada(s)", numero,
                     len(alternativas))
        return None

    resposta = primeira_correspondencia(ESTRATEGIAS_RESPOSTA, fragmento)
    if not resposta:
        logger.debug("[DEBUG - DESCARTADA] Fragmento %d -> gabarito não encontrado", numero)
        return None

    return {
        "pergunta": pergunta,
        "alternativas": {letra: alternativas[letra] for letra in LETRAS},
        "resposta_correta": resposta,
    }


def parsear_questoes_html(conteudo_html):
    if not conteudo_html:
        return []
    html = str(conteudo_html)

    questoes = []
    for numero, fragmento in enumerate(segmentar(html), start=1):
        questao = extrair_questao(fragmento, numero)
        if questao:
            questoes.append(questao)

    logger.debug("[DEBUG - FIM] %d questão(ões) reconhecida(s)", len(questoes))
    return questoes
