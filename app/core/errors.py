"""Platform exceptions.

Every error raised by the domain services derives from :class:`PlatformError`
and carries the HTTP status it maps to, so routers never translate errors by
hand; ``app.main`` registers one handler for the whole hierarchy.
"""
from typing import Any


class PlatformError(Exception):
    """Base exception for lookup-code and address operations."""

    status_code = 400
    default_code = "error.msg.platform"

    def __init__(self, message: str | None = None, code: str | None = None, details: Any = None):
        self.message = message or "An error occurred"
        self.code = code or self.default_code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        error_dict = {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            error_dict["details"] = self.details
        return error_dict


class ValidationError(PlatformError):
    """Payload failed validation; ``errors`` lists the offending fields."""

    default_code = "validation.msg.validation.errors.exist"

    def __init__(self, errors: list[dict], message: str | None = None):
        self.errors = errors
        super().__init__(message or "Validation errors exist.", details={"errors": errors})


class ResourceNotFound(PlatformError):
    status_code = 404
    default_code = "error.msg.resource.not.found"


class ReferenceNotFound(ResourceNotFound):
    """A code value token (numeric id or label) did not resolve."""

    default_code = "error.msg.codevalue.reference.invalid"

    def __init__(self, token: Any, code_name: str | None = None):
        self.token = token
        self.code_name = code_name
        if isinstance(token, int):
            message = f"Code value with identifier {token} does not exist"
        else:
            message = f"Code value with label {token!r} does not exist"
        if code_name:
            message += f" for a code with name {code_name}"
        super().__init__(message, details={"token": token, "codeName": code_name})


class CodeNotFound(ResourceNotFound):
    default_code = "error.msg.code.id.invalid"

    def __init__(self, code_id: int):
        super().__init__(f"Code with identifier {code_id} does not exist", details={"codeId": code_id})


class CodeValueNotFound(ResourceNotFound):
    default_code = "error.msg.codevalue.id.invalid"

    def __init__(self, token: Any, code_id: int | None = None):
        if isinstance(token, int):
            message = f"Code value with identifier {token} does not exist"
        else:
            message = f"Code value with name {token} does not exist"
            self.default_code = "error.msg.codevalue.name.invalid"
        if code_id is not None:
            message += f" for code {code_id}"
        super().__init__(message, code=self.default_code, details={"codeValue": token, "codeId": code_id})


class ClientNotFound(ResourceNotFound):
    default_code = "error.msg.client.id.invalid"

    def __init__(self, client_id: int):
        super().__init__(f"Client with identifier {client_id} does not exist", details={"clientId": client_id})


class AddressNotFound(ResourceNotFound):
    default_code = "error.msg.address.invalid"

    def __init__(self, client_id: int | None = None, address_id: int | None = None):
        parts = []
        if address_id is not None:
            parts.append(f"identifier {address_id}")
        if client_id is not None:
            parts.append(f"client {client_id}")
        message = "Address with " + " for ".join(parts) + " does not exist" if parts else "Address does not exist"
        super().__init__(message, details={"clientId": client_id, "addressId": address_id})


class IntegrityConflict(PlatformError):
    """Write rejected by a uniqueness rule or by rows still referencing the target."""

    status_code = 409
    default_code = "error.msg.data.integrity.issue"
