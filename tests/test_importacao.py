import json
from datetime import datetime

import pytest

from servidor.importacao import ALTERNATIVAS_VAZIAS, montar_registro, montar_registros, normalizar_alternativas


@pytest.mark.parametrize("valor, esperado", [
    ({"a": "3", "b": "4", "c": "5", "d": "6", "e": "7"}, ["A) 3", "B) 4", "C) 5", "D) 6", "E) 7"]),
    (["A) um", "B) dois"], ["A) um", "B) dois"]),
    (json.dumps(["A) x", "B) y"]), ["A) x", "B) y"]),
    ("não é json", ALTERNATIVAS_VAZIAS),
    ({"b": "sem a"}, ALTERNATIVAS_VAZIAS),
    ([], ALTERNATIVAS_VAZIAS),
    (None, ALTERNATIVAS_VAZIAS),
    (json.dumps({"a": "objeto"}), ALTERNATIVAS_VAZIAS),
])
def test_normalizar_alternativas(valor, esperado):
    assert normalizar_alternativas(valor) == esperado


def test_montar_registro():
    agora = datetime(2025, 3, 9, 14, 30)
    questao = {"pergunta": "2+2=?", "alternativas": {"a": "3", "b": "4", "c": "5", "d": "6", "e": "7"},
               "resposta_correta": "b"}

    registro = montar_registro(questao, 0, "mat-1", "Difícil", agora)

    assert registro["titulo"] == "Questão 1"
    assert registro["descricao"] == "Questão importada em lote - 09/03/2025"
    assert registro["tipo"] == "teste"
    assert registro["correta"] == "b"
    assert registro["dificuldade"] == "Difícil"
    assert registro["total_questoes"] == 1
    assert registro["tempo_limite"] == 5
    assert registro["ativo"] is True
    assert registro["criado_em"] == "2025-03-09T14:30:00"


def test_dificuldade_e_gabarito_padrao():
    registro = montar_registro({"correta": "c", "dificuldade": "Fácil"}, 4, "mat-1")
    sem_nada = montar_registro({}, 0, "mat-1")

    assert registro["titulo"] == "Questão 5"
    assert registro["correta"] == "c"
    assert registro["dificuldade"] == "Fácil"
    assert sem_nada["dificuldade"] == "Médio"
    assert sem_nada["pergunta"] == ""
    assert sem_nada["correta"] == ""


def test_montar_registros_numera_em_ordem():
    registros = montar_registros([{"pergunta": "a"}, {"pergunta": "b"}], "mat-1", "Médio")

    assert [r["titulo"] for r in registros] == ["Questão 1", "Questão 2"]
    assert len({r["criado_em"] for r in registros}) == 1
