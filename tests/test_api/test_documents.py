"""Tests for batch and document endpoints."""

from insight_monitor.extraction.schemas import DocumentBatch, ExtractionStatus
from insight_monitor.extraction.service import UnsupportedUploadError, UploadTooLargeError
from insight_monitor.storage.repository import BatchNotFoundError

from tests.conftest import FIXED_TIME, LONG_TEXT, make_document


def _batch(batch_id: int = 10) -> DocumentBatch:
    return DocumentBatch(
        name="Q4 research",
        description="Sell-side notes",
        id=batch_id,
        created_at=FIXED_TIME,
        updated_at=FIXED_TIME,
    )


class TestBatches:
    def test_create_batch(self, client, mock_doc_repo):
        mock_doc_repo.create_batch.return_value = _batch()

        resp = client.post("/batches", json={"name": "Q4 research", "description": "Sell-side notes"})

        assert resp.status_code == 201
        data = resp.json()
        assert data["id"] == 10
        assert data["name"] == "Q4 research"
        created = mock_doc_repo.create_batch.await_args.args[0]
        assert created.description == "Sell-side notes"

    def test_create_batch_requires_name(self, client):
        resp = client.post("/batches", json={"name": ""})
        assert resp.status_code == 422

    def test_get_batch_not_found(self, client):
        resp = client.get("/batches/99")
        assert resp.status_code == 404

    def test_get_batch_with_documents(self, client, mock_doc_repo, binary_document):
        mock_doc_repo.get_batch.return_value = _batch()
        mock_doc_repo.list_documents.return_value = [make_document(), binary_document]

        resp = client.get("/batches/10")

        assert resp.status_code == 200
        docs = resp.json()["documents"]
        assert [d["extraction_kind"] for d in docs] == ["plain_text", "binary_content"]
        assert [d["analyzable"] for d in docs] == [True, False]

    def test_list_batches(self, client, mock_doc_repo):
        mock_doc_repo.list_batches.return_value = [_batch(11), _batch(10)]

        resp = client.get("/batches", params={"owner_id": 7})

        assert resp.status_code == 200
        assert [b["id"] for b in resp.json()] == [11, 10]
        mock_doc_repo.list_batches.assert_awaited_once_with(7)

    def test_update_batch(self, client, mock_doc_repo):
        mock_doc_repo.update_batch.return_value = _batch()

        resp = client.patch("/batches/10", json={"name": "Q4 research"})

        assert resp.status_code == 200
        mock_doc_repo.update_batch.assert_awaited_once_with(
            10, name="Q4 research", description=None
        )

    def test_update_missing_batch(self, client, mock_doc_repo):
        mock_doc_repo.update_batch.return_value = None

        assert client.patch("/batches/99", json={"description": "x"}).status_code == 404

    def test_update_rejects_empty_name(self, client):
        assert client.patch("/batches/10", json={"name": ""}).status_code == 422

    def test_delete_batch(self, client, mock_extraction_service):
        mock_extraction_service.delete_batch.return_value = 2

        resp = client.delete("/batches/10")

        assert resp.status_code == 200
        assert resp.json() == {"deleted": True, "files_removed": 2}

    def test_delete_missing_batch(self, client, mock_extraction_service):
        mock_extraction_service.delete_batch.side_effect = BatchNotFoundError("Batch 99 not found")

        resp = client.delete("/batches/99")

        assert resp.status_code == 404
        assert resp.json()["error_type"] == "not_found"


class TestUpload:
    def test_text_upload(self, client, mock_extraction_service):
        mock_extraction_service.ingest_upload.return_value = make_document()

        resp = client.post(
            "/batches/10/documents",
            files={"file": ("q4_report.txt", LONG_TEXT.encode(), "text/plain")},
        )

        assert resp.status_code == 201
        data = resp.json()
        assert data["extraction_status"] == "extracted"
        assert data["text_preview"].startswith("NVIDIA reported")
        mock_extraction_service.ingest_upload.assert_awaited_once_with(
            10, "q4_report.txt", LONG_TEXT.encode()
        )

    def test_pdf_upload_pending(self, client, mock_extraction_service, pending_document):
        mock_extraction_service.ingest_upload.return_value = pending_document

        resp = client.post(
            "/batches/10/documents",
            files={"file": ("deck.pdf", b"%PDF-1.7", "application/pdf")},
        )

        assert resp.status_code == 201
        assert resp.json()["extraction_status"] == "pending"
        assert resp.json()["extraction_kind"] is None

    def test_too_large_is_413(self, client, mock_extraction_service):
        mock_extraction_service.ingest_upload.side_effect = UploadTooLargeError("too big")

        resp = client.post("/batches/10/documents", files={"file": ("a.txt", b"x")})

        assert resp.status_code == 413
        assert resp.json() == {"detail": "too big", "error_type": "too_large"}

    def test_declared_size_checked_before_reading(self, client, mock_extraction_service):
        mock_extraction_service.validate_upload.side_effect = UploadTooLargeError("too big")

        resp = client.post("/batches/10/documents", files={"file": ("a.txt", b"x" * 64)})

        assert resp.status_code == 413
        name, size = mock_extraction_service.validate_upload.call_args.args
        assert (name, size) == ("a.txt", 64)
        mock_extraction_service.ingest_upload.assert_not_awaited()

    def test_read_stops_past_the_limit(self, client, mock_extraction_service):
        mock_extraction_service.max_upload_bytes = 4
        mock_extraction_service.ingest_upload.return_value = make_document()

        client.post("/batches/10/documents", files={"file": ("a.txt", b"0123456789")})

        assert mock_extraction_service.ingest_upload.await_args.args[2] == b"01234"

    def test_unsupported_is_415(self, client, mock_extraction_service):
        mock_extraction_service.ingest_upload.side_effect = UnsupportedUploadError("nope")

        resp = client.post("/batches/10/documents", files={"file": ("a.zip", b"x")})

        assert resp.status_code == 415
        assert resp.json()["error_type"] == "unsupported_type"

    def test_unknown_batch_is_404(self, client, mock_extraction_service):
        mock_extraction_service.ingest_upload.side_effect = BatchNotFoundError("Batch 99 not found")

        resp = client.post("/batches/99/documents", files={"file": ("a.txt", b"x")})

        assert resp.status_code == 404
        assert resp.json()["error_type"] == "not_found"


class TestGetDocument:
    def test_not_found(self, client):
        assert client.get("/documents/1").status_code == 404

    def test_failed_extraction_reported(self, client, mock_doc_repo):
        mock_doc_repo.get_document.return_value = make_document(
            filename="broken.pdf",
            status=ExtractionStatus.FAILED,
            extraction_error="file vanished",
        )

        resp = client.get("/documents/1")

        assert resp.status_code == 200
        assert resp.json()["extraction_status"] == "failed"
        assert resp.json()["extraction_error"] == "file vanished"
