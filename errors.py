class VaultError(Exception):
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(VaultError):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)


class Unauthorized(VaultError):
    status_code = 401
    message = 'Unauthorized'


class InvalidCredentials(VaultError):
    status_code = 401
    message = 'Invalid email or password'


class NotFound(VaultError):
    status_code = 404

    def __init__(self, entity='Resource'):
        self.entity = entity
        super().__init__(f'{entity} not found')


class RateLimited(VaultError):
    status_code = 429

    def __init__(self, retry_after):
        self.retry_after = int(retry_after)
        minutes = max(1, -(-self.retry_after // 60))
        super().__init__(f'Too many login attempts. Please try again after {minutes} minutes.')


class InternalError(VaultError):
    status_code = 500
