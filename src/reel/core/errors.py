"""Error kinds raised by the reel engine.

All of these are local and recoverable. The tool layer reports them to the
user as a single message.
"""


class ReelError(Exception):
    """Base class for every engine error."""


class TooManyImages(ReelError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Images are limited to {limit} per reel.")


class EmptyContent(ReelError):
    def __init__(self, message: str = "Text slides need non-blank content."):
        super().__init__(message)


class IndexOutOfRange(ReelError):
    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"Index {index} is outside 0..{length - 1}." if length
                         else f"Index {index} is out of range for an empty sequence.")


class EmptySequence(ReelError):
    def __init__(self, message: str = "The slide sequence is empty."):
        super().__init__(message)


class ExportInProgress(ReelError):
    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Export job '{job_id}' is still running.")


class NotFound(ReelError):
    def __init__(self, what: str, item_id: str):
        self.item_id = item_id
        super().__init__(f"{what} '{item_id}' not found.")


class ExportFailed(ReelError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Export failed: {reason}")


class OrderMismatch(ReelError):
    def __init__(self, given: int, length: int):
        self.given = given
        self.length = length
        super().__init__(f"The {given} slide IDs given are not a reordering of the "
                         f"{length} current slides.")
