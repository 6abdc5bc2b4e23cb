import os
import tempfile
from pathlib import Path

# Keep the import-time init_db() of the app away from the working tree.
os.environ.setdefault("DB_URL", f"sqlite:///{Path(tempfile.mkdtemp()) / 'registro_uti.db'}")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from registro_uti.api.core import config  # noqa: E402
from registro_uti.api.main import app  # noqa: E402


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "registro_uti.db"
    monkeypatch.setattr(config.settings, "db_url", f"sqlite:///{path}")
    config.init_db()
    return path


@pytest.fixture
def client(db_path):
    return TestClient(app)


@pytest.fixture
def conn(db_path):
    for session in config.get_session():
        yield session


@pytest.fixture
def mediciones_normales():
    return {
        "temperatura": 37.0,
        "presionArterialMedia": 90,
        "frecuenciaCardiaca": 80,
        "frecuenciaRespiratoria": 16,
        "oxigenacion": 80,
        "phArterial": 7.4,
        "sodio": 140,
        "potasio": 4.0,
        "creatinina": 1.0,
        "hematocrito": 40,
        "leucocitos": 10,
        "glasgow": 15,
        "edad": 40,
        "fio2": 0.21,
        "enfermedadCronica": False,
    }
