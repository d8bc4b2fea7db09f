class DomainError(Exception):
    """Base class for domain-specific errors."""

    pass


class DuplicateUserError(DomainError):
    """Raised when registering an e-mail address that is already taken."""

    pass


class UserNotFoundError(DomainError):
    """Raised when a user is not found in the database."""

    pass


class MissingTitleError(DomainError):
    """Raised when a saved document has no title to key it on."""

    pass


class TrendsUnavailableError(DomainError):
    """Raised when neither the live trends source nor the CSV can be read."""

    pass
