import json
import logging
import os
import re
import shutil
import sys

from openpyxl import load_workbook

from servidor import config

logger = logging.getLogger(__name__)


def limpar_texto_profundo(texto):
    if not texto:
        return ""

    txt = str(texto)

    # 1. Remove caracteres de retorno de carro do Windows (\r)
    txt = txt.replace('\r', '')

    # 2. Substitui 2 ou mais quebras de linha por apenas uma: colapsa os buracos
    txt = re.sub(r'\n{2,}', '\n', txt)

    # 3. Remove espaços no início/fim de cada linha ("   Texto   \n" vira "Texto\n")
    linhas = [linha.strip() for linha in txt.split('\n')]
    txt = '\n'.join(linhas)

    return txt.strip()


def caminho_backup(caminho):
    base, ext = os.path.splitext(caminho)
    return f"{base}_BACKUP{ext or '.xlsx'}"


def limpar_alternativas(valor):
    try:
        alternativas = json.loads(valor)
    except (TypeError, ValueError):
        return valor
    if not isinstance(alternativas, list):
        return valor
    return json.dumps([limpar_texto_profundo(a) for a in alternativas], ensure_ascii=False)


def executar_limpeza(caminho=None):
    caminho = caminho or config.ARQ_SIMULADOS
    try:
        shutil.copy2(caminho, caminho_backup(caminho))
    except FileNotFoundError:
        logger.error("Arquivo não encontrado em %s", caminho)
        return 0
    logger.info("Backup criado: %s", caminho_backup(caminho))

    wb = load_workbook(caminho)
    if config.ABA_SIMULADOS not in wb.sheetnames:
        logger.error("Aba '%s' não encontrada em %s", config.ABA_SIMULADOS, caminho)
        return 0
    ws = wb[config.ABA_SIMULADOS]
    logger.info("Planilha carregada. Processando %d linhas...", ws.max_row - 1)

    col_pergunta = config.COLUNAS_SIMULADOS.index("pergunta")
    col_alternativas = config.COLUNAS_SIMULADOS.index("alternativas")

    contador_alteracoes = 0
    for row in ws.iter_rows(min_row=2, max_row=ws.max_row):
        for col_idx, limpar in ((col_pergunta, limpar_texto_profundo), (col_alternativas, limpar_alternativas)):
            if col_idx >= len(row):
                continue
            celula = row[col_idx]
            valor_original = celula.value
            if not valor_original:
                continue

            valor_limpo = limpar(valor_original)
            # Só atualiza se houve mudança
            if valor_original != valor_limpo:
                celula.value = valor_limpo
                contador_alteracoes += 1

    wb.save(caminho)
    logger.info("Banco limpo e salvo. Total de células corrigidas: %d", contador_alteracoes)
    return contador_alteracoes


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s %(message)s")
    executar_limpeza(sys.argv[1] if len(sys.argv) > 1 else None)
