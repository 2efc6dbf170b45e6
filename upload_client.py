import logging
import mimetypes
from typing import Optional

import requests
from pydantic import ValidationError

import config
from schemas import RawSheet
from utils.result import Result

logger = logging.getLogger(__name__)

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_MIME_TYPE = "application/vnd.ms-excel"


def guess_content_type(filename: str) -> str:
    lowered = filename.lower()
    if lowered.endswith(".xlsx"):
        return XLSX_MIME_TYPE
    if lowered.endswith(".xls"):
        return XLS_MIME_TYPE
    return mimetypes.guess_type(filename)[0] or "application/octet-stream"


class UploadClient:
    """
    Posts a spreadsheet to the upload endpoint and returns the parsed RawSheet.

    One request per call: there is no retry and no cancellation. Every failure
    comes back as a failed Result whose error is fit to show to the user.
    """

    def __init__(self, upload_url: Optional[str] = None, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.upload_url = upload_url or config.UPLOAD_URL
        self.timeout = config.UPLOAD_TIMEOUT_SECONDS if timeout is None else timeout
        self.session = session or requests.Session()

    def upload(self, filename: str, content: bytes) -> Result[RawSheet]:
        """
        Upload one file as multipart form field ``file``.

        Args:
            filename: Name sent with the file
            content: File bytes

        Returns:
            Result[RawSheet]: The parsed sheet, or a failure for a transport
            error, a non-2xx status, or an empty/unparseable/ill-shaped body
        """
        log_context = {"upload_url": self.upload_url, "upload_filename": filename, "size_bytes": len(content)}
        logger.info("Uploading spreadsheet", extra=log_context)

        files = {"file": (filename, content, guess_content_type(filename))}
        try:
            response = self.session.post(self.upload_url, files=files, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Upload request failed", extra={**log_context, "error": str(e)})
            return Result.upstream_error(f"Upload failed: {str(e)}")

        if not response.ok:
            detail = self._error_detail(response)
            logger.warning(
                "Upload rejected by server",
                extra={**log_context, "status_code": response.status_code, "detail": detail}
            )
            message = f"Upload failed ({response.status_code})"
            return Result.fail(f"{message}: {detail}" if detail else message, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError:
            logger.error("Upload response is not JSON", extra=log_context)
            return Result.upstream_error("No data received")

        if not payload:
            logger.error("Upload response is empty", extra=log_context)
            return Result.upstream_error("No data received")

        try:
            raw_sheet = RawSheet.model_validate(payload)
        except ValidationError as e:
            logger.error("Upload response has unexpected shape", extra={**log_context, "error": str(e)})
            return Result.upstream_error("Invalid response from upload endpoint")

        logger.info(f"Received sheet '{raw_sheet.sheet_name}'", extra=log_context)
        return Result.ok(raw_sheet)

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return (response.text or "").strip()[:200]
        if isinstance(body, dict):
            return str(body.get("error") or body.get("detail") or "")
        return ""
