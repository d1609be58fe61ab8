class StudyHubError(Exception):
    """Base class for errors raised by the StudyHub controllers."""


class ValidationError(StudyHubError):
    """A required field is missing. Raised before any remote call is made."""

    def __init__(self, message='Vui lòng điền đủ thông tin!'):
        super().__init__(message)
        self.message = message


class SignInRequired(StudyHubError):
    """A write was attempted without a signed-in identity."""

    def __init__(self, message='Vui lòng đăng nhập để tiếp tục.'):
        super().__init__(message)
        self.message = message
