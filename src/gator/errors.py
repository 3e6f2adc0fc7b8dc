from __future__ import annotations


class GatorError(RuntimeError):
    """Base class for every failure the CLI reports to the user."""


class ConfigError(GatorError):
    pass


class UsageError(GatorError):
    pass


class UnknownCommandError(UsageError):
    def __init__(self, name: str):
        super().__init__(f"unknown command: {name}")
        self.name = name


class AuthError(GatorError):
    pass


class NoCurrentUserError(AuthError):
    def __init__(self) -> None:
        super().__init__("no current user set (run login first)")


class UnknownUserError(AuthError):
    def __init__(self, name: str):
        super().__init__(f"user {name} does not exist")
        self.name = name


class StoreError(GatorError):
    pass


class ConstraintViolation(StoreError):
    """A uniqueness or foreign-key constraint rejected a write."""


class NotFoundError(StoreError):
    pass


class FeedError(GatorError):
    pass


class FeedFetchError(FeedError):
    pass


class FeedDecodeError(FeedError):
    pass


class NoFeedsError(GatorError):
    def __init__(self) -> None:
        super().__init__("no feeds available")
