"""Error envelope shared by every non-2xx response.

    {"error": {"code": "not_found", "message": "Product with id ... not found"}}

``code`` is one of validation_error, not_found, conflict, domain_error or
internal_error.
"""

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail

    @classmethod
    def body(cls, code: str, message: str) -> dict[str, object]:
        """Envelope as a plain dict, ready for JSONResponse."""
        return cls(error=ErrorDetail(code=code, message=message)).model_dump()
