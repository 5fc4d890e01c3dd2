"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidClosingDayError(DomainException):
    """Card closing day is outside 1..31"""

    pass


class InvalidBatchSizeError(DomainException):
    """Orphan correction batch size is not a positive integer"""

    pass


class CardNotFoundError(DomainException):
    """Referenced credit card does not exist"""

    pass


class ForecastServiceError(DomainException):
    """Forecast service rejected or never acknowledged an invalidation"""

    pass
