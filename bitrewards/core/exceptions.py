from fastapi import HTTPException, status


class RedirectException(HTTPException):
    def __init__(self, location: str):
        super().__init__(
            status_code=status.HTTP_303_SEE_OTHER,
            detail=f"Redirecting to {location}",
            headers={"Location": location},
        )
        self.location = location


class LoginRequired(RedirectException):
    def __init__(self):
        super().__init__("/login")


class AdminRequired(RedirectException):
    def __init__(self):
        super().__init__("/dashboard")


class WithdrawalError(Exception):
    """A withdrawal request that fails validation; the message is shown to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UsernameTaken(Exception):
    pass
