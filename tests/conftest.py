import os
import tempfile

# logs dos testes fora da pasta do pacote
os.environ.setdefault("CAIXA_LOGS_DIR", tempfile.mkdtemp(prefix="caixa-logs-"))

import pytest

from caixa.infra.migrations import apply_migrations
from caixa.infra.views import create_views


@pytest.fixture
def db_path(tmp_path):
    p = str(tmp_path / "caixa_test.sqlite")
    apply_migrations(p)
    create_views(p)
    return p
