import itertools

import httpx
import pytest

from bridge.core import files as file_ops
from bridge.core.errors import UpstreamParseError, UpstreamStatusError, UpstreamUnavailable
from bridge.models.files import UNKNOWN_FILENAME, FileRecord


def record(doc_id: str, file_name: str | None = None) -> FileRecord:
    metadata = {"file_name": file_name} if file_name is not None else None
    return FileRecord(doc_id=doc_id, doc_metadata=metadata)


def test_dedupe_keeps_greater_doc_id_in_any_order() -> None:
    records = [record("a", "report.pdf"), record("b", "report.pdf")]
    for ordering in itertools.permutations(records):
        view = file_ops.dedupe_by_filename(list(ordering))
        assert list(view) == ["report.pdf"]
        assert view["report.pdf"].doc_id == "b"


def test_dedupe_missing_filename_collides_on_unknown() -> None:
    view = file_ops.dedupe_by_filename([record("x1"), record("x2", None), record("y", "notes.md")])
    assert set(view) == {UNKNOWN_FILENAME, "notes.md"}
    assert view[UNKNOWN_FILENAME].doc_id == "x2"


def test_non_string_filename_is_unknown() -> None:
    odd = FileRecord(doc_id="z", doc_metadata={"file_name": 42})
    assert odd.file_name is None
    assert odd.display_name == UNKNOWN_FILENAME


async def test_list_files_dedupes_and_keeps_envelope(upstream, upstream_client) -> None:
    upstream.add_file("001", "a.pdf")
    upstream.add_file("002", "a.pdf")
    upstream.add_file("003", "b.txt")

    listing = await file_ops.list_files(upstream_client)

    assert listing.object == "list"
    assert listing.model == "private-gpt"
    assert sorted(r.doc_id for r in listing.data) == ["002", "003"]


async def test_list_files_surfaces_upstream_failures(upstream, upstream_client) -> None:
    upstream.unreachable = True
    with pytest.raises(UpstreamUnavailable):
        await file_ops.list_files(upstream_client)


async def test_list_files_undecodable_body(upstream, upstream_client) -> None:
    upstream.overrides[("GET", "/v1/ingest/list")] = httpx.Response(200, text="<html>oops</html>")
    with pytest.raises(UpstreamParseError):
        await file_ops.list_files(upstream_client)


async def test_list_files_non_200(upstream, upstream_client) -> None:
    upstream.overrides[("GET", "/v1/ingest/list")] = httpx.Response(503, json={"detail": "busy"})
    with pytest.raises(UpstreamStatusError) as excinfo:
        await file_ops.list_files(upstream_client)
    assert excinfo.value.status_code == 503


async def test_delete_all_empty_issues_no_deletes(upstream, upstream_client) -> None:
    result = await file_ops.delete_all(upstream_client)

    assert result.success is True
    assert (result.deleted_count, result.failed_count, result.total_files) == (0, 0, 0)
    assert result.message == "No files to delete"
    assert upstream.calls("DELETE") == []


async def test_delete_all_counts_partial_failures(upstream, upstream_client) -> None:
    for i, name in enumerate(["a.pdf", "b.pdf", "c.pdf", "d.pdf", "e.pdf"]):
        upstream.add_file(f"id{i}", name)
    upstream.failing_deletes = {"id1", "id3"}

    result = await file_ops.delete_all(upstream_client)

    assert result.success is True
    assert result.deleted_count == 3
    assert result.failed_count == 2
    assert result.total_files == 5
    assert result.failed_files == ["b.pdf", "d.pdf"]
    assert len(upstream.calls("DELETE", "/v1/ingest/")) == 5


async def test_delete_all_does_not_dedupe(upstream, upstream_client) -> None:
    upstream.add_file("1", "same.pdf")
    upstream.add_file("2", "same.pdf")

    result = await file_ops.delete_all(upstream_client)

    assert result.deleted_count == 2
    assert result.total_files == 2


async def test_delete_all_network_error_per_file_is_counted(upstream, upstream_client, monkeypatch) -> None:
    upstream.add_file("1", "ok.pdf")
    upstream.add_file("2")

    original = upstream_client.delete_ingested

    async def flaky_delete(doc_id: str):
        if doc_id == "2":
            raise UpstreamUnavailable("Upstream API error", details="timed out")
        return await original(doc_id)

    monkeypatch.setattr(upstream_client, "delete_ingested", flaky_delete)

    result = await file_ops.delete_all(upstream_client)

    assert result.deleted_count == 1
    assert result.failed_files == [UNKNOWN_FILENAME]


async def test_delete_all_listing_failure_aborts(upstream, upstream_client) -> None:
    upstream.unreachable = True
    with pytest.raises(UpstreamUnavailable):
        await file_ops.delete_all(upstream_client)
    assert upstream.calls("DELETE") == []


async def test_processing_status_absent_file_is_processing(upstream, upstream_client) -> None:
    upstream.add_file("1", "present.pdf")

    status = await file_ops.processing_status(upstream_client, "missing.pdf")

    assert status.exists is False
    assert status.processing is True
    assert status.status.completed is False


async def test_processing_status_present_file(upstream, upstream_client) -> None:
    upstream.add_file("1", "present.pdf")

    status = await file_ops.processing_status(upstream_client, "present.pdf")

    assert status.exists is True
    assert status.processing is False
    assert status.status.message == "File processing completed"


async def test_delete_all_counts_undecodable_delete_response(upstream, upstream_client) -> None:
    upstream.add_file("1", "corrupt.pdf")
    upstream.add_file("2", "fine.pdf")
    upstream.overrides[("DELETE", "/v1/ingest/1")] = httpx.Response(
        200, content=b"not-gzip", headers={"Content-Encoding": "gzip"}
    )

    result = await file_ops.delete_all(upstream_client)

    assert result.total_files == 2
    assert result.deleted_count == 1
    assert result.failed_count == 1
    assert result.failed_files == ["corrupt.pdf"]
