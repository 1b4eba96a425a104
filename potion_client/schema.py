from collections import OrderedDict

from werkzeug.utils import cached_property
from jsonschema import Draft4Validator, FormatChecker

from .reference import ResourceBound
from .exceptions import ValidationError


class Schema(object):
    """
    The base class for all types with a schema in Potion-Client. Has :attr:`response` and a :attr:`request`
    attributes for the schema to be used, respectively, for data received from and data sent to the API.

    Any class inheriting from schema needs to implement :meth:`schema`.

    ..  attribute:: response

        JSON-schema of data returned by the API.

    .. attribute:: request

        JSON-schema used for validation of data sent to the API.

    """

    def schema(self):
        """
        Abstract method returning the JSON schema used by both :attr:`response` and :attr:`request`.

        :return: a JSON-schema or a tuple of JSON-schemas in the formats ``(response_schema, request_schema)`` or
            ``(read_schema, create_schema, update_schema)``
        """
        raise NotImplementedError()

    @cached_property
    def response(self):
        schema = self.schema()
        if isinstance(schema, tuple):
            return schema[0]
        return schema

    @cached_property
    def request(self):
        schema = self.schema()
        if isinstance(schema, tuple):
            return schema[1]
        return schema

    create = request

    @cached_property
    def update(self):
        schema = self.schema()
        if isinstance(schema, tuple):
            return schema[-1]
        return schema

    @cached_property
    def _validator(self):
        Draft4Validator.check_schema(self.request)
        return Draft4Validator(self.request, format_checker=FormatChecker())

    @cached_property
    def _update_validator(self):
        Draft4Validator.check_schema(self.update)
        return Draft4Validator(self.update, format_checker=FormatChecker())

    def format(self, value):
        """
        Formats a python object for JSON serialization. Noop by default.

        :param object value:
        :return:
        """
        return value

    def iter_errors(self, instance, update=False):
        if update:
            validator = self._update_validator
        else:
            validator = self._validator
        return validator.iter_errors(instance)

    def convert(self, instance, update=False):
        """
        Validates a deserialized JSON object against :attr:`request` and converts it into a python object.

        :param instance: JSON import
        :raises ValidationError: if validation failed
        """
        errors = list(self.iter_errors(instance, update))
        if errors:
            raise ValidationError(errors)
        return instance


class FieldSet(Schema, ResourceBound):
    """
    A schema representation of a dictionary of :class:`fields.Raw` objects.

    Uses the fields' ``io`` attributes to determine whether they are sent with create and update requests. Keys that
    are not declared in the field set pass through :meth:`format` and :meth:`convert` untouched.

    :param dict fields: a dictionary of :class:`fields.Raw` objects
    :param required_fields: a list or tuple of field names that are required when creating an item
    """

    def __init__(self, fields, required_fields=None):
        self.fields = fields
        self.required = set(required_fields or ())

    def _schema(self):
        read_schema = {
            "type": "object",
            "properties": OrderedDict((
                (key, field.response) for key, field in self.fields.items() if 'r' in field.io))
        }

        create_schema = {
            "type": "object",
            "properties": OrderedDict((
                (key, field.request) for key, field in self.fields.items() if 'c' in field.io))
        }

        update_schema = {
            "type": "object",
            "properties": OrderedDict((
                (key, field.request) for key, field in self.fields.items() if 'u' in field.io))
        }

        if self.required:
            create_schema['required'] = sorted(self.required)

        return read_schema, create_schema, update_schema

    def schema(self):
        return self._schema()

    def format(self, item, update=None):
        """
        Formats the declared fields present in ``item`` for a request body.

        :param dict item: attributes keyed by attribute name
        :param update: ``True`` to skip fields that cannot be updated, ``False`` to skip fields that cannot be
            created, ``None`` to format every declared field
        :return: a dictionary keyed by property name
        """
        output = OrderedDict()
        for key, field in self.fields.items():
            if update is True and 'u' not in field.io or update is False and 'c' not in field.io:
                continue
            attribute = field.attribute or key
            if attribute in item:
                output[key] = field.output(key, item)
        return output

    def convert(self, instance, update=False, validate=False):
        """
        Converts the declared properties of a JSON object into python values.

        :param dict instance: JSON-object, typically parsed from a response
        :param bool validate: when ``True``, validates the object against the create or update schema first
        :return: a new dictionary keyed by attribute name
        """
        if validate:
            super(FieldSet, self).convert(instance, update)

        result = dict(instance)
        for key, field in self.fields.items():
            if key not in instance:
                continue
            value = result.pop(key)
            result[field.attribute or key] = field.convert(value, validate=False)
        return result

    def validate(self, item, update=False):
        """
        Validates the declared fields in ``item`` and returns the errors keyed by property name.

        :param dict item: attributes keyed by attribute name
        :param bool update: when ``True``, validates against the update schema without required fields
        :return: a dictionary of lists of error messages; empty if valid
        """
        instance = self.format(item, update=update)
        errors = {}
        for error in self.iter_errors(instance, update):
            if error.validator == 'required':
                continue
            key = error.path[0] if error.path else 'base'
            errors.setdefault(key, []).append(error.message)

        if not update:
            for key in sorted(self.required):
                if key not in instance:
                    errors.setdefault(key, []).append("'{}' is a required property".format(key))
        return errors
