class LifeAlignError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LifeAlignError):
    status_code = 400


class AuthenticationError(LifeAlignError):
    status_code = 401


class NotFoundError(LifeAlignError):
    status_code = 404


class ConflictError(LifeAlignError):
    status_code = 409
