import logging
import os
import uuid

import pdfplumber
from flask import Flask, jsonify, request
from flask_cors import CORS

from servidor import banco, config
from servidor.extrator_html import parsear_questoes_html
from servidor.importacao import montar_registros

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

MSG_NENHUMA_QUESTAO = "Nenhuma questão encontrada. Verifique o formato do HTML."
MSG_CORPO_INVALIDO = "Corpo da requisição deve ser um objeto JSON"


def extrair_texto_pdf(caminho_arquivo):
    texto = ""
    with pdfplumber.open(caminho_arquivo) as pdf:
        for page in pdf.pages: texto += (page.extract_text() or "") + "\n"
    return texto


def corpo_json():
    body = request.get_json(silent=True)
    return {} if body is None else body


def extensao_de(nome_arquivo):
    return nome_arquivo.rsplit('.', 1)[1].lower() if '.' in nome_arquivo else ""


def resposta_analise(conteudo):
    questoes = parsear_questoes_html(conteudo)

    # Marca o que já está no banco para o operador revisar antes de importar
    sigs = banco.assinaturas_cadastradas()
    for q in questoes: q["ja_cadastrada"] = banco.gerar_assinatura(q) in sigs

    total = len(questoes)
    logger.info("%d questões parseadas com sucesso", total)
    mensagem = f"{total} questões encontradas e prontas para importar!" if total else MSG_NENHUMA_QUESTAO
    return jsonify({"success": True, "questoes": questoes, "total": total, "mensagem": mensagem})


# --- ROTAS ---
@app.route("/api/admin/questoes/analisar-html", methods=["POST"])
def analisar_html():
    body = corpo_json()
    if not isinstance(body, dict):
        return jsonify({"erro": MSG_CORPO_INVALIDO}), 400
    html_content = body.get("html_content")
    materia_id = body.get("materia_id")

    if not isinstance(html_content, str) or not html_content.strip() or not materia_id:
        return jsonify({"erro": "HTML content e materia_id são obrigatórios"}), 400
    if len(html_content) > config.TAMANHO_MAXIMO_HTML:
        return jsonify({"erro": "Conteúdo HTML grande demais para análise"}), 413

    logger.info("Recebendo HTML para análise (%d caracteres, matéria %s)", len(html_content), materia_id)
    try:
        return resposta_analise(html_content)
    except PermissionError:
        return jsonify({"erro": "Arquivo Excel aberto. Feche para analisar."}), 500
    except Exception as e:
        logger.exception("Erro ao analisar HTML")
        return jsonify({"erro": f"Erro ao analisar HTML: {e}"}), 500


@app.route("/api/admin/questoes/analisar-arquivo", methods=["POST"])
def analisar_arquivo():
    f = request.files.get('file')
    materia_id = request.form.get('materia_id', '')

    if not f or not f.filename: return jsonify({"erro": "Sem arquivo"}), 400
    if not materia_id:
        return jsonify({"erro": "Nenhuma matéria selecionada."}), 400

    ext = extensao_de(f.filename)
    if ext not in config.EXTENSOES_TEXTO | config.EXTENSOES_PDF:
        return jsonify({"erro": f"Formato .{ext} não suportado"}), 415

    os.makedirs(config.UPLOAD_TMP_DIR, exist_ok=True)
    p = os.path.join(config.UPLOAD_TMP_DIR, f"{uuid.uuid4()}.{ext}")
    f.save(p)
    try:
        if ext in config.EXTENSOES_PDF:
            conteudo = extrair_texto_pdf(p)
        else:
            with open(p, encoding="utf-8", errors="replace") as arq:
                conteudo = arq.read()
        if len(conteudo) > config.TAMANHO_MAXIMO_HTML:
            return jsonify({"erro": "Arquivo grande demais para análise"}), 413
        logger.info("Arquivo %s recebido para análise (matéria %s)", f.filename, materia_id)
        return resposta_analise(conteudo)
    except PermissionError:
        return jsonify({"erro": "Arquivo Excel aberto. Feche para analisar."}), 500
    except Exception as e:
        logger.exception("Erro ao analisar arquivo %s", f.filename)
        return jsonify({"erro": f"Erro ao analisar arquivo: {e}"}), 500
    finally:
        if os.path.exists(p): os.remove(p)


@app.route("/api/add-questions-bulk", methods=["POST"])
def add_questions_bulk():
    body = corpo_json()
    if not isinstance(body, dict):
        return jsonify({"erro": MSG_CORPO_INVALIDO}), 400
    questoes = body.get("questoes")
    materia_id = body.get("materia_id")
    nivel = body.get("nivel")

    if not questoes or not isinstance(questoes, list):
        return jsonify({"erro": "Array de questões é obrigatório"}), 400
    if not all(isinstance(q, dict) for q in questoes):
        return jsonify({"erro": "Cada questão deve ser um objeto"}), 400
    if not materia_id:
        return jsonify({"erro": "ID da matéria é obrigatório"}), 400

    try:
        registros = montar_registros(questoes, materia_id, nivel)
        logger.info("Inserindo %d questões na matéria %s", len(registros), materia_id)
        inseridos = banco.inserir_questoes(registros)
    except PermissionError:
        return jsonify({"erro": "Arquivo Excel aberto. Feche para importar as questões."}), 500
    except Exception:
        logger.exception("Erro ao inserir questões")
        return jsonify({"erro": "Erro ao inserir questões no banco de dados"}), 500

    return jsonify({
        "sucesso": True,
        "total": len(inseridos),
        "questoes": inseridos,
        "message": f"{len(inseridos)} questões importadas com sucesso na tabela simulados!"
    })


@app.route("/api/setup-questoes-table", methods=["POST"])
def setup_questoes_table():
    try:
        ja_existia = banco.verificar_tabela()
    except PermissionError:
        return jsonify({"erro": "Arquivo Excel aberto. Feche para verificar a estrutura."}), 500
    except Exception:
        logger.exception("Erro ao verificar estrutura do banco")
        return jsonify({"erro": "Erro ao verificar estrutura do banco"}), 500

    mensagem = "Tabela simulados já existe e está funcionando" if ja_existia else "Tabela simulados criada"
    return jsonify({"success": True, "message": mensagem, "table_used": config.ABA_SIMULADOS})


@app.route("/questoes", methods=["GET"])
def get_q():
    dados = banco.carregar_questoes()
    dados.reverse()  # Mais recentes primeiro

    # --- FILTRAGEM ---
    texto = request.args.get('texto', '').lower()
    materia_id = request.args.get('materia_id', '')
    dificuldade = request.args.get('dificuldade', '')

    if any([texto, materia_id, dificuldade]):
        filtrados = []
        for q in dados:
            if texto and texto not in (str(q.get('pergunta') or '')).lower(): continue
            if materia_id and str(q.get('materia_id') or '') != materia_id: continue
            if dificuldade and str(q.get('dificuldade') or '') != dificuldade: continue
            filtrados.append(q)
        dados = filtrados

    # --- PAGINAÇÃO ---
    page = request.args.get('page')
    if page:
        try:
            page = int(page)
        except ValueError:
            return jsonify(dados)

        total_items = len(dados)
        total_pages = (total_items + config.POR_PAGINA - 1) // config.POR_PAGINA

        # Página maior que o total devolve a última
        if page > total_pages and total_pages > 0: page = total_pages
        if page < 1: page = 1

        start = (page - 1) * config.POR_PAGINA
        end = start + config.POR_PAGINA

        return jsonify({
            "items": dados[start:end],
            "total": total_items,
            "pagina_atual": page,
            "total_paginas": total_pages if total_pages > 0 else 1
        })

    return jsonify(dados)


@app.route("/questoes/<string:id>", methods=["DELETE"])
def del_q(id):
    try:
        if not banco.remover_questao(id):
            return jsonify({"status": "Questão não encontrada"}), 404
        return jsonify({"status": "Removido"})
    except PermissionError:
        return jsonify({"erro": "Arquivo Excel aberto. Feche para excluir."}), 500


@app.route("/check-duplicidade", methods=["POST"])
def check_dup():
    payload = corpo_json()
    if not isinstance(payload, dict):
        return jsonify({"erro": MSG_CORPO_INVALIDO}), 400
    if not payload.get("pergunta"): return jsonify({"existe": False})
    sig = banco.gerar_assinatura(payload)
    return jsonify({"existe": sig in banco.assinaturas_cadastradas()})


if __name__ == "__main__":
    app.run(debug=True)
