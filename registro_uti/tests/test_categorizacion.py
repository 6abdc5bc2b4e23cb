import pytest

from registro_uti.core.scores import UnknownScoreError, available_scores, engine, run_score
from registro_uti.core.scores.classifiers import KINESIOLOGY_COMPLEXITY
from registro_uti.core.scores.errors import DomainRangeError


def axes(*values):
    names = ("patronRespiratorio", "asistenciaVentilatoria", "sasGlasgow", "tosSecreciones", "asistencia")
    return dict(zip(names, values))


@pytest.mark.parametrize(
    "values,total,complejidad,carga",
    [
        ((1, 1, 1, 1, 1), 5, "Baja", "0-1"),
        ((3, 3, 1, 1, 1), 9, "Mediana", "2-3 + Noche"),
        ((3, 3, 3, 1, 1), 11, "Alta", "3-4 + Noche"),
        ((5, 5, 5, 5, 5), 25, "Alta", "3-4 + Noche"),
    ],
)
def test_categorization(values, total, complejidad, carga):
    result = engine.compute_categorization(axes(*values))
    assert result.puntaje_total == total
    assert result.complejidad == complejidad
    assert result.carga_asistencial == carga


@pytest.mark.parametrize("total,complejidad", [(5, "Baja"), (6, "Mediana"), (10, "Mediana"), (11, "Alta"), (25, "Alta")])
def test_complexity_boundaries(total, complejidad):
    assert KINESIOLOGY_COMPLEXITY.classify(total).complejidad == complejidad


@pytest.mark.parametrize("total", [4, 26])
def test_complexity_outside_domain(total):
    with pytest.raises(DomainRangeError):
        KINESIOLOGY_COMPLEXITY.classify(total)


@pytest.mark.parametrize("value", [2, 0, 6, True, "3", None])
def test_axis_values_must_be_one_three_or_five(value):
    with pytest.raises(DomainRangeError) as excinfo:
        engine.compute_categorization(axes(value, 1, 1, 1, 1))
    assert excinfo.value.violations[0].field == "patronRespiratorio"


def test_unknown_axis_is_rejected():
    payload = dict(axes(1, 1, 1, 1, 1), movilidad=3)
    with pytest.raises(DomainRangeError):
        engine.compute_categorization(payload)


def test_registry_dispatch():
    assert {"apache2", "apache2_mediciones", "nas", "categorizacion"} <= set(available_scores())
    assert run_score("categorizacion", axes(1, 1, 1, 1, 1))["complejidad"] == "Baja"
    with pytest.raises(UnknownScoreError):
        run_score("sofa", {})
