"""Errors raised by the accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError):
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Unknown email, or a password that does not match."""
    pass


class InactiveAccountError(AccountsServiceError):
    """The account was deactivated from the back-office."""
    pass


class PasswordChangeError(AccountsServiceError):
    """The new password was refused by the password validators."""
    pass
