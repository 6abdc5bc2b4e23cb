from registro_uti.core.scores.apache2 import SUBSCORE_FIELDS


def test_list_scores(client):
    response = client.get("/api/scores/")
    assert response.status_code == 200
    assert "nas" in response.json()


def test_calculator_does_not_store(client):
    response = client.post("/api/scores/nas", json={"selecciones": {"item_1b": True, "item_9": True}})
    assert response.status_code == 200
    data = response.json()
    assert data["puntuacionTotal"] == 13.5
    assert data["nivelCarga"] == "Baja"
    assert client.get("/api/nas/").json()["pagination"]["total"] == 0


def test_calculator_reports_violations(client):
    response = client.post(
        "/api/scores/categorizacion",
        json={"patronRespiratorio": 1, "asistenciaVentilatoria": 1, "sasGlasgow": 1, "tosSecreciones": 1, "asistencia": 4},
    )
    assert response.status_code == 400
    assert response.json()["detail"]["violations"][0]["field"] == "asistencia"


def test_unknown_score(client):
    assert client.post("/api/scores/sofa", json={}).status_code == 404


def test_health(client):
    data = client.get("/health/").json()
    assert data["status"] == "ok"
    assert "apache2" in data["scores"]


def test_calculator_rejects_selection_list(client):
    response = client.post("/api/scores/nas", json={"selecciones": ["item_1a"]})
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["reason"] == "domain_range"
    assert detail["violations"][0]["field"] == "selecciones"


def test_calculator_rejects_malformed_selected_ranges(client):
    subscores = {name: 0 for name in SUBSCORE_FIELDS}
    response = client.post("/api/scores/apache2", json=dict(subscores, rangosSeleccionados="temp_≥41"))
    assert response.status_code == 400
    assert response.json()["detail"]["violations"][0]["field"] == "rangosSeleccionados"

    response = client.post(
        "/api/scores/apache2", json=dict(subscores, rangosSeleccionados={"temperatura": ["temp_36-38.4"]})
    )
    assert response.status_code == 400
    assert response.json()["detail"]["violations"][0]["field"] == "temperatura"


def test_calculator_rejects_fractional_age(client, mediciones_normales):
    response = client.post("/api/scores/apache2_mediciones", json=dict(mediciones_normales, edad=44.5))
    assert response.status_code == 400
    assert response.json()["detail"]["violations"][0]["field"] == "edad"
