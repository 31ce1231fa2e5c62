import json
from datetime import datetime

from servidor import config

ALTERNATIVAS_VAZIAS = ["A) ", "B) ", "C) ", "D) ", "E) "]


def normalizar_alternativas(valor):
    alternativas = []

    # Formato objeto {a: "...", b: "...", c: "...", d: "...", e: "..."}
    if isinstance(valor, dict):
        if valor.get("a"):
            alternativas = [f"{letra.upper()}) {valor.get(letra) or ''}" for letra in ("a", "b", "c", "d", "e")]
    elif isinstance(valor, list):
        alternativas = valor
    elif isinstance(valor, str):
        try:
            alternativas = json.loads(valor)
        except ValueError:
            alternativas = []

    if not isinstance(alternativas, list) or not alternativas:
        alternativas = list(ALTERNATIVAS_VAZIAS)
    return alternativas


def montar_registro(questao, indice, materia_id, nivel=None, agora=None):
    agora = agora or datetime.now()
    return {
        "titulo": f"Questão {indice + 1}",
        "descricao": f"Questão importada em lote - {agora.strftime('%d/%m/%Y')}",
        "tipo": "teste",
        "materia_id": materia_id,
        "pergunta": questao.get("pergunta") or "",
        "alternativas": normalizar_alternativas(questao.get("alternativas")),
        "correta": questao.get("resposta_correta") or questao.get("correta") or "",
        "dificuldade": nivel or questao.get("dificuldade") or config.NIVEL_PADRAO,
        "total_questoes": 1,
        "tempo_limite": 5,
        "ativo": True,
        "criado_em": agora.isoformat(timespec="seconds"),
    }


def montar_registros(questoes, materia_id, nivel=None):
    agora = datetime.now()
    return [montar_registro(q, i, materia_id, nivel, agora) for i, q in enumerate(questoes)]
