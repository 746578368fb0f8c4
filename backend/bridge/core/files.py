"""
File registry view, bulk delete and the processing-status probe.

All three read the upstream ingest list; nothing is cached between requests.
"""
from loguru import logger

from bridge.clients.upstream import UpstreamClient
from bridge.core.errors import UpstreamError
from bridge.models.files import (
    BulkDeleteResult,
    FileRecord,
    IngestedFileList,
    ProcessingState,
    ProcessingStatus,
)


def dedupe_by_filename(records: list[FileRecord]) -> dict[str, FileRecord]:
    """
    Keep one record per display filename.

    On collision the record with the lexicographically greater doc_id wins.
    That is only a freshness heuristic: it assumes the upstream hands out
    increasing ids. Records without a filename all share the "Unknown" slot.
    """
    view: dict[str, FileRecord] = {}
    for record in records:
        key = record.display_name
        existing = view.get(key)
        if existing is None or record.doc_id > existing.doc_id:
            view[key] = record
    return view


async def list_files(upstream: UpstreamClient) -> IngestedFileList:
    listing = await upstream.list_ingested()
    unique = dedupe_by_filename(listing.data)
    logger.info("File list returned: {} unique files (from {} total)", len(unique), len(listing.data))
    return IngestedFileList(object=listing.object, model=listing.model, data=list(unique.values()))


async def delete_all(upstream: UpstreamClient) -> BulkDeleteResult:
    """
    Delete every ingested document, one call at a time.

    Only the initial listing can fail the operation. Individual delete
    failures are counted and the loop carries on.
    """
    logger.info("Starting delete all files operation...")
    listing = await upstream.list_ingested()
    records = listing.data

    if not records:
        logger.info("No files to delete")
        return BulkDeleteResult(message="No files to delete")

    logger.info("Deleting {} files...", len(records))
    deleted = 0
    failed: list[str] = []

    for record in records:
        name = record.display_name
        try:
            resp = await upstream.delete_ingested(record.doc_id)
        except UpstreamError as e:
            logger.warning("Error deleting file {} ({}): {}", name, record.doc_id, e.details or e.message)
            failed.append(name)
            continue

        if resp.status_code == 200:
            deleted += 1
            logger.info("Successfully deleted file: {} ({})", name, record.doc_id)
        else:
            failed.append(name)
            logger.warning("Failed to delete file {} ({}) - status: {}", name, record.doc_id, resp.status_code)

    logger.info(
        "Delete all files completed: {} deleted, {} failed out of {} total",
        deleted, len(failed), len(records),
    )
    return BulkDeleteResult(
        message=f"Bulk delete completed: {deleted} deleted, {len(failed)} failed",
        deleted_count=deleted,
        failed_count=len(failed),
        total_files=len(records),
        failed_files=failed,
    )


async def processing_status(upstream: UpstreamClient, filename: str) -> ProcessingStatus:
    """
    Report whether a file has shown up in the ingest list yet.

    A missing file is reported as still processing, which also covers files
    that were never uploaded or whose ingestion failed.
    """
    listing = await upstream.list_ingested()
    exists = any(record.file_name == filename for record in listing.data)
    logger.info("Processing status check for {}: exists={}", filename, exists)
    return ProcessingStatus(
        filename=filename,
        exists=exists,
        processing=not exists,
        status=ProcessingState(
            completed=exists,
            message="File processing completed" if exists else "File is still being processed",
        ),
    )
