import pytest

from registro_uti.core.scores import engine
from registro_uti.core.scores.apache2 import (
    SUBSCORE_FIELDS,
    SUBSCORE_MAX,
    AdmissionType,
    SeverityMeasurements,
)
from registro_uti.core.scores.classifiers import APACHE_RISK, RISK_LEVELS
from registro_uti.core.scores.engine import measurements_from_payload
from registro_uti.core.scores.errors import (
    MISSING_DISCRIMINATOR,
    DomainRangeError,
    MissingDiscriminatorError,
)


def subscores_for(total):
    remaining = total
    points = {}
    for name in SUBSCORE_FIELDS:
        points[name] = min(remaining, SUBSCORE_MAX[name])
        remaining -= points[name]
    assert remaining == 0
    return points


def measurements(**overrides):
    values = dict(
        temperatura=37.0,
        presion_arterial_media=90,
        frecuencia_cardiaca=80,
        frecuencia_respiratoria=16,
        oxigenacion=80,
        ph_arterial=7.4,
        sodio=140,
        potasio=4.0,
        creatinina=1.0,
        hematocrito=40,
        leucocitos=10,
        glasgow=15,
        edad=40,
        fio2=0.21,
    )
    values.update(overrides)
    return SeverityMeasurements(**values)


def test_normal_measurements_score_zero():
    result = engine.compute_severity(measurements())
    assert result.puntaje_total == 0
    assert result.riesgo_mortalidad == "4%"
    assert result.nivel_riesgo == "Bajo"
    assert set(result.rangos_seleccionados) == set(SUBSCORE_FIELDS)
    assert result.rangos_seleccionados["oxigenacion"] == "ox_normal"
    assert result.rangos_seleccionados["enfermedadCronica"] == "enf_sin"


def test_oxygenation_rule_follows_fio2():
    high = engine.compute_severity(measurements(oxigenacion=300, fio2=0.6))
    low = engine.compute_severity(measurements(oxigenacion=300, fio2=0.4))
    assert high.sub_scores["oxigenacion"] == 2
    assert high.rangos_seleccionados["oxigenacion"] == "ox_aado2_low"
    assert low.sub_scores["oxigenacion"] == 0


def test_fio2_threshold_selects_gradient():
    result = engine.compute_severity(measurements(oxigenacion=250, fio2=0.5))
    assert result.sub_scores["oxigenacion"] == 2


def test_missing_fio2_is_a_missing_discriminator():
    with pytest.raises(MissingDiscriminatorError) as excinfo:
        engine.compute_severity(measurements(fio2=None))
    assert excinfo.value.violations[0].field == "fio2"


def test_missing_discriminator_reported_alongside_range_errors():
    with pytest.raises(MissingDiscriminatorError) as excinfo:
        engine.compute_severity(measurements(fio2=None, glasgow=2))
    fields = [v.field for v in excinfo.value.violations]
    assert fields[0] == "fio2"
    assert "glasgow" in fields


def test_fio2_outside_unit_interval_is_rejected():
    with pytest.raises(DomainRangeError):
        engine.compute_severity(measurements(fio2=21))


@pytest.mark.parametrize(
    "tipo,points",
    [
        (AdmissionType.CIRUGIA_ELECTIVA, 2),
        (AdmissionType.MEDICA, 5),
        (AdmissionType.CIRUGIA_URGENTE, 5),
    ],
)
def test_chronic_health_depends_on_admission(tipo, points):
    result = engine.compute_severity(measurements(enfermedad_cronica=True, tipo_admision=tipo))
    assert result.sub_scores["enfermedadCronica"] == points


def test_chronic_health_without_admission_type():
    with pytest.raises(MissingDiscriminatorError) as excinfo:
        engine.compute_severity(measurements(enfermedad_cronica=True))
    violation = excinfo.value.violations[0]
    assert violation.reason == MISSING_DISCRIMINATOR
    assert violation.field == "tipoAdmision"


@pytest.mark.parametrize(
    "total,percentage",
    [(0, "4%"), (4, "4%"), (5, "8%"), (9, "8%"), (10, "15%"), (34, "73%"), (35, "85%"), (59, "85%")],
)
def test_risk_boundaries(total, percentage):
    result = engine.evaluate_severity(subscores_for(total))
    assert result.puntaje_total == total
    assert result.riesgo_mortalidad == percentage


def test_risk_is_monotonic():
    previous_pct = 0
    previous_level = 0
    for total in range(0, 60):
        bucket = APACHE_RISK.classify(total)
        pct = int(bucket.percentage.rstrip("%"))
        level = RISK_LEVELS.index(bucket.level)
        assert pct >= previous_pct
        assert level >= previous_level
        previous_pct, previous_level = pct, level


def test_subscore_maxima_come_from_tables():
    assert SUBSCORE_MAX["edad"] == 6
    assert SUBSCORE_MAX["enfermedadCronica"] == 5
    assert sum(SUBSCORE_MAX.values()) == 59


def test_subscore_out_of_range_is_rejected():
    points = subscores_for(0)
    points["temperatura"] = 5
    with pytest.raises(DomainRangeError) as excinfo:
        engine.evaluate_severity(points)
    assert excinfo.value.violations[0].field == "temperatura"


def test_missing_subscore_is_rejected():
    points = subscores_for(0)
    del points["glasgow"]
    with pytest.raises(DomainRangeError):
        engine.evaluate_severity(points)


def test_selected_range_must_match_points():
    points = subscores_for(0)
    points["temperatura"] = 3
    with pytest.raises(DomainRangeError):
        engine.evaluate_severity(points, {"temperatura": "temp_≥41"})

    points["temperatura"] = 4
    points["oxigenacion"] = 3
    result = engine.evaluate_severity(points, {"temperatura": "temp_≥41", "oxigenacion": "ox_pao2_55_60"})
    assert result.puntaje_total == 7
    assert result.rangos_seleccionados == {"temperatura": "temp_≥41", "oxigenacion": "ox_pao2_55_60"}


def test_unknown_range_id_is_rejected():
    with pytest.raises(DomainRangeError):
        engine.evaluate_severity(subscores_for(0), {"temperatura": "temp_99"})


def test_measurements_payload_validation():
    with pytest.raises(DomainRangeError) as excinfo:
        measurements_from_payload({"temperatura": "alta"})
    fields = {v.field for v in excinfo.value.violations}
    assert "temperatura" in fields
    assert "edad" in fields


def test_measurements_payload_rejects_unknown_admission(mediciones_normales):
    payload = dict(mediciones_normales, enfermedadCronica=True, tipoAdmision="ambulatoria")
    with pytest.raises(DomainRangeError):
        measurements_from_payload(payload)


def test_critical_patient_from_measurements(mediciones_normales):
    payload = dict(
        mediciones_normales,
        temperatura=39.5,
        presionArterialMedia=65,
        frecuenciaCardiaca=120,
        frecuenciaRespiratoria=30,
        oxigenacion=300,
        fio2=0.6,
        phArterial=7.30,
        sodio=150,
        potasio=5.6,
        creatinina=1.6,
        hematocrito=48,
        leucocitos=16,
        glasgow=12,
        edad=70,
        enfermedadCronica=True,
        tipoAdmision="cirugia_urgente",
    )
    result = engine.compute("apache2_mediciones", payload)
    assert result["puntajeTotal"] == 30
    assert result["riesgoMortalidad"] == "73%"
    assert result["nivelRiesgo"] == "Crítico"
    assert result["phArterial"] == 2
    assert result["rangosSeleccionados"]["edad"] == "edad_65-74"


def test_summary_grid_range_ids_are_accepted():
    points = subscores_for(0)
    points.update(glasgow=3, sodio=2, creatinina=2, oxigenacion=3)
    rangos = {
        "glasgow": "glasgow_≤9",
        "sodio": "sodio_≤129",
        "creatinina": "creatinina_≤0.6",
        "oxigenacion": "ox_pao2_56_60",
    }
    result = engine.evaluate_severity(points, rangos)
    assert result.puntaje_total == 10
    assert result.rangos_seleccionados == rangos


def test_summary_grid_range_ids_keep_their_points():
    points = subscores_for(0)
    points["glasgow"] = 4
    with pytest.raises(DomainRangeError) as excinfo:
        engine.evaluate_severity(points, {"glasgow": "glasgow_≤9"})
    assert excinfo.value.violations[0].field == "glasgow"


@pytest.mark.parametrize("rangos", ["temp_≥41", ["temp_≥41"]])
def test_selected_ranges_must_be_a_mapping(rangos):
    with pytest.raises(DomainRangeError) as excinfo:
        engine.evaluate_severity(subscores_for(0), rangos)
    assert excinfo.value.violations[0].field == "rangosSeleccionados"


def test_selected_range_id_must_be_text():
    with pytest.raises(DomainRangeError) as excinfo:
        engine.evaluate_severity(subscores_for(0), {"temperatura": ["temp_36-38.4"]})
    assert excinfo.value.violations[0].field == "temperatura"


def test_fractional_age_is_rejected():
    with pytest.raises(DomainRangeError) as excinfo:
        engine.compute_severity(measurements(edad=44.5))
    assert [v.field for v in excinfo.value.violations] == ["edad"]
