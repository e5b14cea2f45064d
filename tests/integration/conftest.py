from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Iterator

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from restbucks.infrastructure.cache import redis_client
from restbucks.infrastructure.db import session as db_session

PROJECT_DIR = Path(__file__).resolve().parents[2]


@pytest.fixture(scope="session", autouse=True)
def integration_environment(tmp_path_factory: pytest.TempPathFactory) -> Iterator[Path]:
    database_path = tmp_path_factory.mktemp("db") / "restbucks.sqlite3"

    os.environ["DATABASE_URL"] = f"sqlite:///{database_path}"
    # Redis stays unconfigured: the drinks cache and order events degrade to no-ops.
    os.environ.pop("REDIS_URL", None)
    os.environ["APP_ENV"] = "test"
    os.environ["RESTBUCKS_ENGINE_ENABLED"] = "true"
    os.environ["RESTBUCKS_ENGINE_POLL_SECONDS"] = "0.05"
    os.environ["RESTBUCKS_PREPARATION_SECONDS"] = "0.2"
    os.environ.setdefault("OTEL_SERVICE_NAME", "restbucks-test")
    os.environ.setdefault("OTEL_EXPORTER_OTLP_ENDPOINT", "")

    db_session._build_engine.cache_clear()
    redis_client._build_client.cache_clear()

    env = os.environ.copy()
    env["PYTHONPATH"] = f"{PROJECT_DIR / 'src'}{os.pathsep}{env.get('PYTHONPATH', '')}".rstrip(
        os.pathsep
    )

    subprocess.run(
        [sys.executable, "-m", "alembic", "-c", "alembic.ini", "upgrade", "head"],
        cwd=PROJECT_DIR,
        env=env,
        check=True,
    )
    subprocess.run(
        [sys.executable, "-m", "restbucks.tools.seed"],
        cwd=PROJECT_DIR,
        env=env,
        check=True,
    )

    yield database_path

    db_session._build_engine.cache_clear()
