import os, shutil, tempfile
import pytest

# Antes de importar el paquete: config resuelve rutas al importarse
_TMP_HOME = tempfile.mkdtemp(prefix="presupuestos-tests-")
os.environ["PRESUPUESTOS_HOME"] = _TMP_HOME
os.environ["LOG_DIR"] = os.path.join(_TMP_HOME, "logs")
os.environ["LOG_LEVEL"] = "DEBUG"

from presupuestos.storage import MemoryStore, SqliteStore  # noqa: E402


@pytest.fixture(autouse=True, scope="session")
def _init_logging_for_tests(tmp_path_factory):
    # Cada corrida de tests escribe logs a un directorio temporal
    log_dir = tmp_path_factory.mktemp("logs")
    from presupuestos.logging_setup import init_logging
    init_logging(level="DEBUG", log_dir=str(log_dir))

    yield
    shutil.rmtree(_TMP_HOME, ignore_errors=True)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def sqlite_store(tmp_path):
    st = SqliteStore(str(tmp_path / "app.sqlite3")).open()
    yield st
    st.close()


@pytest.fixture
def ids():
    """id_factory determinista: id-1, id-2, ..."""
    counter = {"n": 0}

    def _next():
        counter["n"] += 1
        return f"id-{counter['n']}"
    return _next
