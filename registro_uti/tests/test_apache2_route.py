RUT = "12.345.678-5"


def puntajes(**overrides):
    payload = {
        "pacienteRut": RUT,
        "fecha": "2024-05-01",
        "temperatura": 0,
        "presionArterial": 0,
        "frecuenciaCardiaca": 0,
        "frecuenciaRespiratoria": 0,
        "oxigenacion": 0,
        "phArterial": 0,
        "sodio": 0,
        "potasio": 0,
        "creatinina": 0,
        "hematocrito": 0,
        "leucocitos": 0,
        "glasgow": 0,
        "edad": 0,
        "enfermedadCronica": 0,
    }
    payload.update(overrides)
    return payload


def test_create_from_subscores(client):
    response = client.post(
        "/api/apache2/",
        json=puntajes(temperatura=4, edad=5, rangosSeleccionados={"temperatura": "temp_≥41", "edad": "edad_65-74"}),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["puntajeTotal"] == 9
    assert data["riesgoMortalidad"] == "8%"
    assert data["nivelRiesgo"] == "Bajo-Moderado"
    assert data["modo"] == "puntajes"
    assert data["rangosSeleccionados"]["temperatura"] == "temp_≥41"
    assert data["pacienteRut"] == RUT
    assert data["mediciones"] is None


def test_subscore_out_of_range_returns_structured_400(client):
    response = client.post("/api/apache2/", json=puntajes(temperatura=7))
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["reason"] == "domain_range"
    assert detail["violations"][0]["field"] == "temperatura"
    assert client.get("/api/apache2/").json()["pagination"]["total"] == 0


def test_create_with_summary_grid_ranges(client):
    rangos = {
        "glasgow": "glasgow_≤9",
        "sodio": "sodio_≤129",
        "creatinina": "creatinina_≤0.6",
        "oxigenacion": "ox_pao2_56_60",
    }
    response = client.post(
        "/api/apache2/",
        json=puntajes(glasgow=3, sodio=2, creatinina=2, oxigenacion=3, rangosSeleccionados=rangos),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["puntajeTotal"] == 10
    assert data["rangosSeleccionados"] == rangos


def test_omitted_subscore_is_rejected(client):
    payload = puntajes()
    del payload["glasgow"]
    response = client.post("/api/apache2/", json=payload)
    assert response.status_code == 422
    assert client.get("/api/apache2/").json()["pagination"]["total"] == 0


def test_invalid_rut_is_rejected(client):
    response = client.post("/api/apache2/", json=puntajes(pacienteRut="abc"))
    assert response.status_code == 422


def test_create_from_measurements(client, mediciones_normales):
    payload = dict(mediciones_normales, pacienteRut=RUT, oxigenacion=300, fio2=0.6)
    response = client.post("/api/apache2/mediciones", json=payload)
    assert response.status_code == 201
    data = response.json()
    assert data["oxigenacion"] == 2
    assert data["rangosSeleccionados"]["oxigenacion"] == "ox_aado2_low"
    assert data["puntajeTotal"] == 2
    assert data["modo"] == "mediciones"
    assert data["mediciones"]["fio2"] == 0.6


def test_missing_fio2_returns_missing_discriminator(client, mediciones_normales):
    payload = dict(mediciones_normales, pacienteRut=RUT)
    del payload["fio2"]
    response = client.post("/api/apache2/mediciones", json=payload)
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["reason"] == "missing_discriminator"
    assert detail["violations"][0]["field"] == "fio2"


def test_update_recomputes_and_keeps_other_subscores(client):
    created = client.post("/api/apache2/", json=puntajes(edad=5, glasgow=2)).json()
    response = client.put(f"/api/apache2/{created['id']}", json={"glasgow": 4, "observaciones": "GCS 5"})
    assert response.status_code == 200
    data = response.json()
    assert data["edad"] == 5
    assert data["glasgow"] == 4
    assert data["puntajeTotal"] == 9
    assert data["observaciones"] == "GCS 5"


def test_update_of_measured_record_drops_stale_bucket(client, mediciones_normales):
    created = client.post("/api/apache2/mediciones", json=dict(mediciones_normales, pacienteRut=RUT)).json()
    response = client.put(f"/api/apache2/{created['id']}", json={"temperatura": 3})
    assert response.status_code == 200
    data = response.json()
    assert data["modo"] == "puntajes"
    assert data["puntajeTotal"] == 3
    assert "temperatura" not in data["rangosSeleccionados"]
    assert data["rangosSeleccionados"]["glasgow"] == "gcs_15"


def test_invalid_update_leaves_record_unchanged(client):
    created = client.post("/api/apache2/", json=puntajes(edad=2)).json()
    response = client.put(f"/api/apache2/{created['id']}", json={"edad": 9})
    assert response.status_code == 400
    stored = client.get(f"/api/apache2/{created['id']}").json()
    assert stored["edad"] == 2
    assert stored["puntajeTotal"] == 2


def test_replace_measurements(client, mediciones_normales):
    created = client.post("/api/apache2/", json=puntajes()).json()
    payload = dict(mediciones_normales, edad=80)
    response = client.put(f"/api/apache2/{created['id']}/mediciones", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["modo"] == "mediciones"
    assert data["edad"] == 6
    assert data["puntajeTotal"] == 6


def test_list_filter_and_patient_history(client):
    client.post("/api/apache2/", json=puntajes(fecha="2024-05-01"))
    client.post("/api/apache2/", json=puntajes(fecha="2024-05-03", edad=2))
    client.post("/api/apache2/", json=puntajes(pacienteRut="9.876.543-K", fecha="2024-05-02"))

    listing = client.get("/api/apache2/", params={"pacienteRut": RUT, "limit": 1}).json()
    assert listing["pagination"] == {"total": 2, "limit": 1, "offset": 0, "pages": 2}
    assert listing["items"][0]["fecha"] == "2024-05-03"

    ranged = client.get("/api/apache2/", params={"fechaDesde": "2024-05-02", "fechaHasta": "2024-05-02"}).json()
    assert [item["pacienteRut"] for item in ranged["items"]] == ["9.876.543-K"]

    history = client.get(f"/api/apache2/paciente/{RUT}").json()
    assert history["pagination"]["total"] == 2


def test_summary_by_risk_level(client):
    client.post("/api/apache2/", json=puntajes())
    client.post("/api/apache2/", json=puntajes(edad=6, enfermedadCronica=5, fecha="2024-05-02"))
    summary = client.get("/api/apache2/estadisticas/resumen").json()
    assert summary["totalRegistros"] == 2
    assert summary["promedioPuntaje"] == 5.5
    assert summary["porNivelRiesgo"]["Bajo"] == 1
    assert summary["porNivelRiesgo"]["Moderado"] == 1


def test_get_and_delete(client):
    created = client.post("/api/apache2/", json=puntajes()).json()
    assert client.delete(f"/api/apache2/{created['id']}").status_code == 204
    assert client.get(f"/api/apache2/{created['id']}").status_code == 404
    assert client.delete(f"/api/apache2/{created['id']}").status_code == 404
