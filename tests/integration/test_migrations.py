from __future__ import annotations

import sys
from pathlib import Path

from sqlalchemy import inspect

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from restbucks.infrastructure.db.schema import metadata
from restbucks.infrastructure.db.session import get_engine


def test_migrated_schema_matches_models() -> None:
    inspector = inspect(get_engine())

    assert set(metadata.tables) <= set(inspector.get_table_names())
    for table in metadata.sorted_tables:
        migrated = {column["name"] for column in inspector.get_columns(table.name)}
        assert migrated == set(table.columns.keys()), table.name


def test_one_payment_per_order_is_enforced() -> None:
    inspector = inspect(get_engine())

    unique_columns = [constraint["column_names"] for constraint in inspector.get_unique_constraints("payments")]
    assert ["order_id"] in unique_columns
