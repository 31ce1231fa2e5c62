import pytest

from servidor import config
from servidor.server import app as flask_app


@pytest.fixture
def arq_simulados(tmp_path, monkeypatch):
    """Planilha isolada por teste."""
    caminho = str(tmp_path / "banco" / "simulados.xlsx")
    monkeypatch.setattr(config, "ARQ_SIMULADOS", caminho)
    monkeypatch.setattr(config, "UPLOAD_TMP_DIR", str(tmp_path / "tmp"))
    return caminho


@pytest.fixture
def client(arq_simulados):
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as c:
        yield c


def _questao_div(numero, pergunta, alternativas, resposta):
    itens = "".join(f"<li>{letra}) {texto}</li>" for letra, texto in zip("ABCDE", alternativas))
    return (f"<div class='questao'><p><strong>{numero})</strong> {pergunta}</p>"
            f"<ul>{itens}</ul><p><em>Resposta: {resposta}</em></p></div>")


@pytest.fixture
def questao_div():
    return _questao_div


@pytest.fixture
def html_duas_questoes():
    return (_questao_div(1, "2+2=?", ["3", "4", "5", "6", "7"], "B")
            + _questao_div(2, "Capital do Brasil?", ["Rio", "Salvador", "Brasília", "Recife", "Belém"], "C"))
