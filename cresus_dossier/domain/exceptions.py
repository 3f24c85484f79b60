"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class StorageError(DomainException):
    """Object storage returned an error or is unavailable"""

    pass


class ConsentRequiredError(DomainException):
    """The beneficiary has not accepted the processing of their data"""

    pass


class InvalidStepError(DomainException):
    """Wizard navigation or section update is not allowed"""

    pass


class AuthenticationError(DomainException):
    """Advisor credentials or token are invalid"""

    pass
