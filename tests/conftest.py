import pytest

from pwservice.config import DEFAULTS
from pwservice.hashing import make_hasher
from pwservice.repository import PasswordRepository
from pwservice.web import create_app

# argon2 at its minimum cost; the production parameters make the suite crawl
FAST_HASH = {"time_cost": 1, "memory_cost_kb": 8, "parallelism": 1}


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    # keep the developer's ~/.pwservice and PWSERVICE_* out of every test
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("APPDATA", str(home))
    for key in DEFAULTS:
        monkeypatch.delenv(f"PWSERVICE_{key.upper()}", raising=False)
    return home


@pytest.fixture
def hasher():
    return make_hasher(FAST_HASH)


@pytest.fixture
def repo(tmp_path, hasher):
    r = PasswordRepository.open(str(tmp_path / "log.db"), hasher)
    yield r
    r.close()


@pytest.fixture
def client(repo, tmp_path):
    app = create_app({"db_path": str(tmp_path / "log.db")}, repository=repo)
    app.testing = True
    return app.test_client()
