class LicenseHookError(Exception):
    """Base exception for the licensehook service."""

    pass


class MailingListError(LicenseHookError):
    """Raised when the mailing-list provider rejects a request or cannot be reached.

    ``status_code`` is None when no HTTP response was received.
    """

    def __init__(self, status_code: int | None, body: str):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            super().__init__(f"Mailing-list provider unreachable: {body}")
        else:
            super().__init__(f"Mailing-list provider returned {status_code}: {body}")
