from typing import Optional


# --- Custom Exception Classes ---
class UpstreamError(Exception):
    """The LLM provider timed out, returned a non-success status or an empty answer."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.timeout_seconds = timeout_seconds


class MalformedResponseError(Exception):
    """Provider text that is not valid JSON once the code fence is stripped."""

    def __init__(self, message: str, text: str = ""):
        super().__init__(message)
        self.text = text


class InvalidRequestError(Exception):
    """Request body rejected at the HTTP boundary, rendered as a 400."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
