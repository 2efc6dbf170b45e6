from typing import Generic, TypeVar, Optional, Any, Dict, Union
from http import HTTPStatus

T = TypeVar('T')


class Result(Generic[T]):
    """
    Outcome of an upload or parsing step: either data or a human-readable error.

    Both the backend parser and the frontend upload client return Results, so a
    failure is always reported through the same path and never raised past the
    boundary where it happened.

    Attributes:
        success (bool): Whether the step succeeded
        data (Optional[T]): Payload of a successful step
        error (Optional[str]): Message of a failed step, shown to the user as-is
        status_code (HTTPStatus): HTTP status mirrored by the API (200 / 400 by default)
    """
    def __init__(
        self,
        success: bool,
        data: Optional[T] = None,
        error: Optional[str] = None,
        status_code: Optional[Union[int, HTTPStatus]] = None
    ):
        self.success = success
        self.data = data
        self.error = error

        if status_code is None:
            self.status_code = HTTPStatus.OK if success else HTTPStatus.BAD_REQUEST
        else:
            self.status_code = Result._known_status(int(status_code))

    @staticmethod
    def _known_status(code: int) -> HTTPStatus:
        """HTTPStatus for ``code``; codes outside the enum (520, 499, ...) map to 400 or 502."""
        try:
            return HTTPStatus(code)
        except ValueError:
            return HTTPStatus.BAD_REQUEST if 400 <= code < 500 else HTTPStatus.BAD_GATEWAY

    @classmethod
    def ok(cls, data: T, status_code: Union[int, HTTPStatus] = HTTPStatus.OK) -> "Result[T]":
        """Wrap a successful payload."""
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(cls, error: str, status_code: Union[int, HTTPStatus] = HTTPStatus.BAD_REQUEST) -> "Result[T]":
        """Wrap an error message with the given status (400 by default)."""
        return cls(success=False, error=error, status_code=status_code)

    @classmethod
    def unsupported_file(cls, error: str = "Only .xlsx and .xls files are supported") -> "Result[T]":
        """Failure for files whose extension the viewer does not accept (415)."""
        return cls(success=False, error=error, status_code=HTTPStatus.UNSUPPORTED_MEDIA_TYPE)

    @classmethod
    def too_large(cls, error: str = "Uploaded file is too large") -> "Result[T]":
        """Failure for uploads over the configured size limit (413)."""
        return cls(success=False, error=error, status_code=HTTPStatus.REQUEST_ENTITY_TOO_LARGE)

    @classmethod
    def unreadable(cls, error: str = "Could not read spreadsheet") -> "Result[T]":
        """Failure for content that is not a readable workbook (422)."""
        return cls(success=False, error=error, status_code=HTTPStatus.UNPROCESSABLE_ENTITY)

    @classmethod
    def upstream_error(cls, error: str = "Upload failed") -> "Result[T]":
        """Failure talking to the upload endpoint: transport error or bad reply (502)."""
        return cls(success=False, error=error, status_code=HTTPStatus.BAD_GATEWAY)

    @classmethod
    def server_error(cls, error: str = "Internal server error") -> "Result[T]":
        """Failure for anything unexpected (500)."""
        return cls(success=False, error=error, status_code=HTTPStatus.INTERNAL_SERVER_ERROR)

    def is_success(self) -> bool:
        return self.success

    def is_failure(self) -> bool:
        return not self.success

    def to_dict(self) -> Dict[str, Any]:
        """Body of the error response sent for a failed Result."""
        return {"error": self.error}

    def __str__(self) -> str:
        status_info = f"{self.status_code.value} {self.status_code.phrase}"
        if self.is_success():
            data_repr = str(self.data)
            if len(data_repr) > 100:
                data_repr = f"{data_repr[:97]}..."
            return f"Success ({status_info}): {data_repr}"
        return f"Failure ({status_info}): {self.error}"

    def __repr__(self) -> str:
        return f"Result(success={self.success}, status_code={self.status_code!r}, data={self.data!r}, error={self.error!r})"
