import json

from registro_uti import cli
from registro_uti.api.services.nas_service import nas_service
from registro_uti.api.services.recalculo import audit

RUT = "12.345.678-5"


def seed(client, mediciones_normales):
    client.post("/api/nas/", json={"pacienteRut": RUT, "fecha": "2024-05-01", "selecciones": {"item_1b": True, "item_9": True}})
    client.post("/api/apache2/mediciones", json=dict(mediciones_normales, pacienteRut=RUT, oxigenacion=300, fio2=0.6))
    client.post(
        "/api/categorizacion-kinesiologia/",
        json={
            "pacienteRut": RUT,
            "fecha": "2024-05-01",
            "patronRespiratorio": 3,
            "asistenciaVentilatoria": 3,
            "sasGlasgow": 3,
            "tosSecreciones": 1,
            "asistencia": 1,
        },
    )


def test_stored_records_recompute_identically(client, conn, mediciones_normales):
    seed(client, mediciones_normales)
    assert audit(conn) == []
    for record in nas_service.all(conn):
        assert nas_service.recompute(record)["puntuacionTotal"] == record.puntuacion_total


def test_tampered_record_is_reported(client, conn, mediciones_normales):
    seed(client, mediciones_normales)
    record = nas_service.all(conn)[0]
    output = json.loads(record.output_json)
    output["nivelCarga"] = "Alta"
    conn.execute("UPDATE nas SET output_json = ? WHERE id = ?", (json.dumps(output), record.id))
    conn.commit()

    drifts = audit(conn)
    assert [(d.tabla, d.record_id) for d in drifts] == [("nas", record.id)]


def test_cli_exit_code(client, conn, mediciones_normales, capsys):
    seed(client, mediciones_normales)
    assert cli.main(["recalcular"]) == 0

    conn.execute("UPDATE categorizaciones_kinesiologia SET input_json = ?", (json.dumps({"asistencia": 9}),))
    conn.commit()
    assert cli.main(["recalcular"]) == 1
    assert "categorizaciones_kinesiologia" in capsys.readouterr().out
