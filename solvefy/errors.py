"""Error taxonomy shared by the data layer and the HTTP handlers.

Every error carries the HTTP status it maps to; the application factory
turns them into the ``{success: false, error}`` envelope.
"""


class ApiError(Exception):
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {'success': False, 'error': self.message}


class ValidationError(ApiError):
    status_code = 400
    message = 'Invalid request'

    def __init__(self, message=None, fields=None):
        self.fields = list(fields or [])
        if message is None and self.fields:
            message = 'Missing required fields: ' + ', '.join(self.fields)
        super().__init__(message)

    def to_dict(self):
        d = super().to_dict()
        if self.fields:
            d['fields'] = self.fields
        return d


class AuthenticationError(ApiError):
    status_code = 401
    message = 'Authentication required'


class AuthorizationError(ApiError):
    status_code = 403
    message = 'Unauthorized'


class NotFoundError(ApiError):
    status_code = 404
    message = 'Not found'


class ConflictError(ApiError):
    status_code = 409
    message = 'Conflict'


class StorageError(ApiError):
    status_code = 500
    message = 'Storage failure'
