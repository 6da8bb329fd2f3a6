"""
BOQ Engine Errors
Error taxonomy shared by the engine, the stores and the API layer
"""


class BOQEngineError(Exception):
    """Base class for all engine errors"""
    pass


class ValidationError(BOQEngineError):
    """Malformed input: capacity overflow, negative quantity, missing fields"""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class StateConflictError(BOQEngineError):
    """Illegal quotation status transition"""

    def __init__(self, document_id: str, status: str, action: str):
        super().__init__(
            f"Cannot {action} quotation {document_id} while it is {status}"
        )
        self.document_id = document_id
        self.status = status
        self.action = action


class UniquenessRetryExhausted(BOQEngineError):
    """No free quotation number could be allocated within the retry budget"""

    def __init__(self, attempts: int, last_number: str = None):
        super().__init__(
            f"Could not allocate a unique quotation number after {attempts} attempts"
        )
        self.attempts = attempts
        self.last_number = last_number


class DocumentNotFoundError(BOQEngineError):
    """Quotation document does not exist in the document store"""

    def __init__(self, document_id: str):
        super().__init__(f"Quotation {document_id} not found")
        self.document_id = document_id


class DuplicateDocumentNumberError(BOQEngineError):
    """Raised by a document store when an insert hits the unique number constraint"""

    def __init__(self, number: str):
        super().__init__(f"Quotation number {number} already exists")
        self.number = number


class PricingFallbackWarning(UserWarning):
    """
    A line item was priced with the catalog default because no entry matched.

    Not raised: instances are collected next to the BOQ output so the
    quotation can be reviewed before it is sent.
    """

    def __init__(self, room_id: str, item_id: str, category: str, unit_price):
        super().__init__(
            f"No catalog price for {category!r} (room={room_id}, item={item_id}); "
            f"using default {unit_price}"
        )
        self.room_id = room_id
        self.item_id = item_id
        self.category = category
        self.unit_price = unit_price


class ProjectNotFoundError(BOQEngineError):
    """Project does not exist in the project store"""

    def __init__(self, project_id: str):
        super().__init__(f"Project {project_id} not found")
        self.project_id = project_id
