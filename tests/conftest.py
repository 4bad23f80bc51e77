import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'tessera' and tests/ as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from tessera.core.config import ENV_PREFIX
from tessera.core.schemas.validation import _validator
from tessera.core.stdlib_logging import reset_logging_for_tests
from tessera.data import clear_caches


@pytest.fixture(autouse=True)
def isolated_env(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch):
    """Run every test from an empty project root with no TESSERA_* variables."""
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)
    project = tmp_path_factory.mktemp("project")
    monkeypatch.chdir(project)
    yield project
    reset_logging_for_tests()
    clear_caches()
    _validator.cache_clear()


@pytest.fixture
def catalog_root(tmp_path: Path) -> Path:
    root = tmp_path / "configurations"
    root.mkdir()
    return root
