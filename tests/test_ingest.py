from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from population_pipeline.ingest.fetch_datausa import cache_path_for, download_payload, read_payload
from population_pipeline.ingest.parse_datausa import parse_payload_to_ddf, parse_payload_to_pandas, slugify

URL = "https://api.example.test/data.jsonrecords"


class _FakeResponse:
    def __init__(self, payload: dict[str, Any], status: int = 200) -> None:
        self._payload = payload
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            import requests

            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> dict[str, Any]:
        return self._payload


def test_parse_payload_drops_rows_without_ids(datausa_payload: dict) -> None:
    pdf = parse_payload_to_pandas(datausa_payload)
    assert len(pdf) == 2
    assert set(pdf["entity_id"]) == {"01000US"}
    assert pdf.iloc[0]["slug"] == "united-states"
    assert pdf.iloc[0]["source"] == "DataUSA API"


def test_parse_payload_rejects_missing_data() -> None:
    with pytest.raises(ValueError):
        parse_payload_to_pandas({"annotations": {}})


def test_parse_payload_to_ddf_empty() -> None:
    ddf = parse_payload_to_ddf({"data": []})
    assert len(ddf.compute()) == 0


def test_slugify() -> None:
    assert slugify("  United   States ") == "united-states"


def test_download_payload_caches(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, datausa_payload: dict) -> None:
    calls: list[str] = []

    def fake_get(url: str, **kwargs: Any) -> _FakeResponse:
        calls.append(url)
        return _FakeResponse(datausa_payload)

    monkeypatch.setattr("requests.get", fake_get)

    p1 = download_payload(URL, tmp_path)
    p2 = download_payload(URL, tmp_path)
    assert p1 == p2 == cache_path_for(URL, tmp_path)
    assert calls == [URL]
    assert read_payload(p1)["data"][0]["Nation"] == "United States"

    download_payload(URL, tmp_path, force=True)
    assert len(calls) == 2


def test_download_payload_raises_on_http_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import requests

    monkeypatch.setattr("requests.get", lambda url, **kw: _FakeResponse({}, status=502))
    with pytest.raises(requests.HTTPError):
        download_payload(URL, tmp_path)
    assert not cache_path_for(URL, tmp_path).exists()


def test_parse_payload_skips_non_object_rows(datausa_payload: dict) -> None:
    datausa_payload["data"].extend([None, ["01000US", "United States"], "row"])
    pdf = parse_payload_to_pandas(datausa_payload)
    assert len(pdf) == 2
