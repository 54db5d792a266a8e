"""
Error taxonomy for the shortlink core.

Store implementations translate backend failures into these types so the
services never see SQLAlchemy (or any other driver) exceptions.
"""


class ShortlinkError(Exception):
    """Base class for all shortlink errors"""


class NotFoundError(ShortlinkError):
    """No mapping matches the short code / long URL query"""


class ExpiredError(ShortlinkError):
    """The mapping exists but its TTL has elapsed"""

    def __init__(self, short_code: str):
        super().__init__(f"Short URL '{short_code}' has expired")
        self.short_code = short_code


class DuplicateCodeError(ShortlinkError):
    """The store rejected a record because its short code is taken"""

    def __init__(self, short_code: str):
        super().__init__(f"Short code '{short_code}' already exists")
        self.short_code = short_code


class MaxCollisionError(ShortlinkError):
    """Every insert attempt collided with an existing short code"""

    def __init__(self, attempts: int):
        super().__init__(
            f"Could not store a unique short code after {attempts} attempt(s)"
        )
        self.attempts = attempts


class StoreError(ShortlinkError):
    """Infrastructure failure in a backing store; never retried"""


class QueueUnavailableError(ShortlinkError):
    """The configured access event queue backend could not be reached"""
