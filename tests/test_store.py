from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from population_pipeline.db import bulk_upsert, get_client
from population_pipeline.models import PopulationDoc, Record
from population_pipeline.store import ensure_indexes, find_page, load_records, upsert_docs


def _stored(entity_id: str, year: int, metric: float) -> dict[str, object]:
    return {"entity_id": entity_id, "entity_name": "United States", "year": year, "metric": metric}


def test_load_records_year_range_query() -> None:
    coll = MagicMock()
    coll.find.return_value.sort.return_value = [_stored("us", 2021, 2.0), _stored("us", 2020, 1.0)]

    recs = load_records(coll, start_year=2019, end_year=2021)

    coll.find.assert_called_once_with({"year": {"$gte": 2019, "$lte": 2021}}, {"_id": False})
    coll.find.return_value.sort.assert_called_once_with([("year", -1), ("entity_id", 1)])
    assert recs == [Record("us", "United States", 2021, 2.0), Record("us", "United States", 2020, 1.0)]


def test_load_records_without_range() -> None:
    coll = MagicMock()
    coll.find.return_value.sort.return_value = []
    assert load_records(coll) == []
    coll.find.assert_called_once_with({}, {"_id": False})


def test_find_page_pagination() -> None:
    coll = MagicMock()
    coll.find.return_value.sort.return_value.skip.return_value.limit.return_value = [_stored("us", 2021, 1.0)]
    coll.count_documents.return_value = 25

    docs, pagination = find_page(coll, page=3, limit=10, sort_by="metric", order="asc")

    coll.find.return_value.sort.assert_called_once_with("metric", 1)
    coll.find.return_value.sort.return_value.skip.assert_called_once_with(20)
    assert len(docs) == 1
    assert pagination.model_dump() == {
        "current_page": 3,
        "total_pages": 3,
        "total_records": 25,
        "records_per_page": 10,
    }


@pytest.mark.parametrize(
    "kwargs",
    [{"page": 0}, {"limit": 0}, {"limit": 101}, {"sort_by": "$where"}, {"order": "up"}],
)
def test_find_page_rejects_bad_arguments(kwargs: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        find_page(MagicMock(), **kwargs)  # type: ignore[arg-type]


def test_ensure_indexes_creates_unique_key() -> None:
    coll = MagicMock()
    ensure_indexes(coll)
    first = coll.create_index.call_args_list[0]
    assert first.args[0] == [("entity_id", 1), ("year", 1)]
    assert first.kwargs == {"unique": True}


def test_upsert_docs_writes_one_op_per_doc() -> None:
    coll = MagicMock()
    now = datetime.now(timezone.utc)
    docs = [
        PopulationDoc(entity_id="us", entity_name="US", year=y, metric=1.0, slug="us", fetched_at=now)
        for y in (2020, 2021)
    ]
    assert upsert_docs(coll, docs) == 2
    ops = coll.bulk_write.call_args.args[0]
    assert len(ops) == 2


def test_bulk_upsert_batches_and_skips_missing_keys() -> None:
    coll = MagicMock()
    docs = [
        {"entity_id": "a", "year": 1},
        {"entity_id": "b", "year": 2},
        {"entity_id": "c", "year": 3},
        {"entity_id": "d"},
    ]
    assert bulk_upsert(coll, docs, ("entity_id", "year"), batch_size=2) == 3
    assert coll.bulk_write.call_count == 2


def test_get_client_tls_uses_certifi(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_client(uri: str, **kwargs: object) -> str:
        captured.update(kwargs, uri=uri)
        return "client"

    monkeypatch.setattr("population_pipeline.db.MongoClient", fake_client)

    get_client("mongodb://db.example.test", tls=True)
    assert captured["tls"] is True
    assert str(captured["tlsCAFile"]).endswith(".pem")

    captured.clear()
    get_client("mongodb://localhost:27017")
    assert "tls" not in captured
