"""Error codes returned by invoicing use cases"""

from libs.result import Error

INVOICE_NOT_FOUND = "INVOICE_NOT_FOUND"
INVALID_INVOICE_STATE = "INVALID_INVOICE_STATE"
STORAGE_FAILURE = "STORAGE_FAILURE"
RENDERING_FAILURE = "RENDERING_FAILURE"


def invoice_not_found(invoice_id: str) -> Error:
    return Error(
        code=INVOICE_NOT_FOUND,
        message=f"Invoice with ID {invoice_id} not found",
        reason="Invoice does not exist for this tenant",
    )


def invalid_state(message: str) -> Error:
    return Error(
        code=INVALID_INVOICE_STATE,
        message=message,
        reason="Invoice business rule violated",
    )
