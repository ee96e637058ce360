"""Todo módulo del paquete compila sin warnings (p.ej. escapes inválidos)."""

import warnings
from pathlib import Path

import pytest

import staffdesk

pytestmark = pytest.mark.unit

PACKAGE_DIR = Path(staffdesk.__file__).parent
SOURCES = sorted(PACKAGE_DIR.rglob("*.py"))


@pytest.mark.parametrize(
    "path", SOURCES, ids=[str(p.relative_to(PACKAGE_DIR)) for p in SOURCES]
)
def test_module_compiles_without_warnings(path):
    source = path.read_text(encoding="utf-8")

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        compile(source, str(path), "exec")
