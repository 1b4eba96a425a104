from werkzeug.http import HTTP_STATUS_CODES


class PotionClientException(Exception):
    pass


class PathError(PotionClientException):
    """
    Raised when a request path cannot be built because a placeholder has no matching parameter.

    :param str message: error message
    :param str missing_parameter: name of the placeholder that could not be resolved
    """

    def __init__(self, message, missing_parameter=None):
        super(PathError, self).__init__(message)
        self.missing_parameter = missing_parameter


class ParseError(PotionClientException):
    """
    Raised when a response body is not valid JSON or does not behave like an object or an array.
    """


class AssociationUnknownError(PotionClientException):

    def __init__(self, resource, name):
        super(AssociationUnknownError, self).__init__(
            'Unknown association name "{}" on {}'.format(name, resource.__name__))
        self.resource = resource
        self.name = name


class UnknownAttribute(PotionClientException, AttributeError):

    def __init__(self, resource, name):
        super(UnknownAttribute, self).__init__(
            "'{}' resource has no attribute '{}'".format(resource.__class__.__name__, name))
        self.resource = resource
        self.name = name


class ResourceInvalid(PotionClientException):
    """
    Raised by :meth:`Resource.save_or_raise` when the API rejected a resource.
    """

    def __init__(self, resource, status_code=None):
        self.resource = resource
        self.status_code = status_code
        super(ResourceInvalid, self).__init__('Remote validation failed: {}'.format(self._format_errors()))

    def _format_errors(self):
        errors = self.resource.errors
        if isinstance(errors, dict):
            messages = []
            for key, value in errors.items():
                if isinstance(value, (list, tuple)):
                    messages.extend('{} {}'.format(key, message) for message in value)
                else:
                    messages.append('{} {}'.format(key, value))
            if messages:
                return ', '.join(messages)
        elif isinstance(errors, (list, tuple)) and errors:
            return ', '.join(str(error) for error in errors)
        return HTTP_STATUS_CODES.get(self.status_code, 'unknown error')


class ValidationError(PotionClientException):
    """
    Raised when a value does not match the JSON-schema of a field.

    :param errors: an iterable of :class:`jsonschema.ValidationError` objects
    """

    def __init__(self, errors):
        self.errors = list(errors)
        super(ValidationError, self).__init__(
            '; '.join(error.message for error in self.errors) or 'Validation failed')

