import copy
from datetime import date, datetime
from functools import partial
import logging

from flask import json

from .associations import Association, NestedAttributesSetter
from .attributes import AttributeStore, FieldAttribute
from .collection import Collection
from .exceptions import AssociationUnknownError, ResourceInvalid, UnknownAttribute
from .hooks import HookSet
from .paths import PathSet, build_path, consumed_parameters
from .reference import ResourceBound
from .relation import Relation, Scope
from .schema import FieldSet
from .utils import AttributeDict, is_blank, pluralize, tableize, underscore

log = logging.getLogger(__name__)

ROOT_FORMATS = (None, 'active_model_serializers', 'json_api')


class CustomRoute(object):
    """
    A class-level request to a sub-path of the resource, declared with :func:`custom_get` and its siblings.

    :param str method: HTTP method
    :param str path: path; defaults to the attribute name. A path not starting with ``/`` is relative to the request
        path of the resource for the given parameters.
    """

    def __init__(self, method, path=None):
        self.method = method
        self.path = path
        self.attribute = None

    def __get__(self, instance, owner):
        if owner is None:
            owner = type(instance)
        return partial(getattr(owner, self.method.lower()), self.path or self.attribute)

    def __repr__(self):
        return '<CustomRoute {} {!r}>'.format(self.method, self.path or self.attribute)


def custom_get(path=None):
    return CustomRoute('GET', path)


def custom_post(path=None):
    return CustomRoute('POST', path)


def custom_put(path=None):
    return CustomRoute('PUT', path)


def custom_patch(path=None):
    return CustomRoute('PATCH', path)


def custom_delete(path=None):
    return CustomRoute('DELETE', path)


def _alias(name):
    return property(lambda self: getattr(self, name),
                    lambda self, value: setattr(self, name, value))


class ResourceMeta(type):

    def __new__(mcs, name, bases, members):
        class_ = super(ResourceMeta, mcs).__new__(mcs, name, bases, members)
        class_.meta = meta = AttributeDict(getattr(class_, 'meta', {}) or {})
        method_for = dict(meta.get('method_for') or {})

        changes = {}
        for base in bases:
            if hasattr(base, 'Meta'):
                meta.update((k, v) for k, v in base.Meta.__dict__.items() if not k.startswith('__'))
                method_for.update(base.Meta.__dict__.get('method_for', {}))

        if 'Meta' in members:
            changes = {k: v for k, v in members['Meta'].__dict__.items() if not k.startswith('__')}
            meta.update(changes)
            method_for.update(changes.get('method_for', {}))

            if 'collection_path' in changes and 'resource_path' not in changes:
                meta['resource_path'] = None

        if not changes.get('name'):
            meta['name'] = underscore(name)

        meta['method_for'] = {action: method.upper() for action, method in method_for.items()}
        mcs._check_meta(class_, meta, changes)

        class_.paths = PathSet(meta.collection_path or '/{}'.format(pluralize(meta.name)),
                               meta.resource_path,
                               primary_key=meta.primary_key)

        schema = {}
        for base in bases:
            if hasattr(base, 'Schema'):
                schema.update(base.Schema.__dict__)

        if 'Schema' in members:
            schema.update(members['Schema'].__dict__)

        class_.schema = None
        if schema:
            class_.schema = fs = FieldSet({k: f for k, f in schema.items() if not k.startswith('__')},
                                          required_fields=meta.get('required_fields', None))

            for field_name in meta.get('read_only_fields', ()):
                if field_name in fs.fields:
                    field = fs.fields[field_name] = copy.copy(fs.fields[field_name])
                    field.io = "r"
                    field.__dict__.pop('response', None)

            fs.bind(class_)

            for key, field in fs.fields.items():
                attribute = field.attribute or key
                if attribute not in members:
                    setattr(class_, attribute, FieldAttribute(attribute, field))

        for attribute in meta.get('attributes', ()):
            if attribute not in members and not isinstance(getattr(class_, attribute, None), FieldAttribute):
                setattr(class_, attribute, FieldAttribute(attribute))

        class_.hooks = hooks = (getattr(class_, 'hooks', None) or HookSet()).copy()
        class_.associations = associations = dict(getattr(class_, 'associations', None) or {})
        class_.scopes = scopes = dict(getattr(class_, 'scopes', None) or {})
        class_.routes = routes = dict(getattr(class_, 'routes', None) or {})

        for n, m in members.items():
            for hook_name in getattr(m, '__potion_hooks__', ()):
                if n not in hooks.get(hook_name):
                    hooks.add(hook_name, n)

            if isinstance(m, Association):
                associations[n] = m.attach(class_, n)
            elif isinstance(m, Scope):
                m.attribute = n
                scopes[n] = m
            elif isinstance(m, CustomRoute):
                m.attribute = n
                routes[n] = m
            elif isinstance(m, ResourceBound):
                m.bind(class_)

        for association_name in meta.get('nested_attributes', ()):
            if association_name not in associations:
                raise AssociationUnknownError(class_, association_name)
            setattr(class_, '{}_attributes'.format(association_name), NestedAttributesSetter(association_name))

        for option, target in (('store_metadata', 'metadata'), ('store_response_errors', 'errors')):
            alias = meta.get(option)
            if alias and alias != target:
                setattr(class_, alias, _alias(target))

        registry = getattr(class_, 'registry', None)
        if registry is not None:
            registry[name] = class_

        if meta.get('api') is not None:
            meta.api.add_resource(class_)

        return class_

    @staticmethod
    def _check_meta(class_, meta, changes):
        if meta.get('parse_root_format') not in ROOT_FORMATS:
            raise RuntimeError('{}: unknown parse_root_format {!r}; expected one of {}'.format(
                class_.__name__, meta.parse_root_format, ROOT_FORMATS))


class Resource(object, metaclass=ResourceMeta):
    """
    A remote resource of a JSON API.

    A resource is configured using the ``Schema`` and ``Meta`` attributes, association declarations
    (:class:`BelongsTo`, :class:`HasOne`, :class:`HasMany`), :func:`scope` functions, custom routes and hook
    methods.

    :class:`Meta` class attributes:

    ============================  ==================================  ================================================
    Attribute name                Default                             Description
    ============================  ==================================  ================================================
    api                           ``None``                            The :class:`Api` the resource is added to
    name                          ---                                 Name of the resource; defaults to the
                                                                      underscored class name
    primary_key                   ``'id'``                            Name of the primary key attribute
    collection_path               ``/{pluralized name}``              Collection path template
    resource_path                 ``{collection_path}/:id``           Resource path template
    parse_root_in_json            ``False``                           ``True`` or a key: unwrap response data from a
                                                                      root element
    parse_root_format             ``None``                            ``'active_model_serializers'`` or ``'json_api'``
    include_root_in_json          ``False``                           ``True`` or a key: wrap request bodies in a
                                                                      root element
    root_element                  ``None``                            Root element; defaults to the name
    request_new_object_on_build   ``False``                           :meth:`build` requests ``{collection}/new``
    method_for                    ``{'create': 'POST', ...}``         HTTP methods of the CRUD actions
    default_scope                 ``None``                            Parameters, or a callable receiving a relation
    nested_attributes             ``()``                              Associations with ``{name}_attributes`` setters
    attributes                    ``()``                              Names of untyped declared attributes
    read_only_fields              ``()``                              Declared fields that are never sent
    required_fields               ``()``                              Declared fields required when creating
    store_metadata                ``None``                            Alternative name of :attr:`metadata`
    store_response_errors         ``None``                            Alternative name of :attr:`errors`
    ============================  ==================================  ================================================

    Usage example:

    .. code-block:: python

        class User(Resource):
            organization = BelongsTo()
            comments = HasMany()

            class Schema:
                fullname = fields.String()
                created_at = fields.DateTime(io='r')

            class Meta:
                api = api

        user = User.find(1)
        user.fullname = 'Lindsay Fünke'
        user.save()

    .. attribute:: meta

        A :class:`AttributeDict` of configuration attributes collected from the :class:`Meta` attributes of the base
        classes.

    .. attribute:: schema

        A :class:`FieldSet` containing fields collected from the :class:`Schema` attributes of the base classes.

    .. attribute:: paths

        The :class:`PathSet` with the collection and resource path templates.

    """
    api = None
    meta = None
    schema = None
    paths = None
    hooks = None
    associations = None
    scopes = None
    routes = None
    registry = {}

    class Meta:
        api = None
        name = None
        primary_key = 'id'
        collection_path = None
        resource_path = None
        parse_root_in_json = False
        parse_root_format = None
        include_root_in_json = False
        root_element = None
        request_new_object_on_build = False
        method_for = {
            'create': 'POST',
            'update': 'PUT',
            'find': 'GET',
            'destroy': 'DELETE',
            'new': 'GET'
        }
        default_scope = None
        nested_attributes = ()
        attributes = ()
        read_only_fields = ()
        required_fields = ()
        store_metadata = None
        store_response_errors = None

    def __init__(self, attributes=None, **kwargs):
        self._attributes = AttributeStore()
        self._associations = {}
        self._inverse = {}

        params = dict(attributes or {})
        params.update(kwargs)
        self._metadata = params.pop('_metadata', None) or {}
        self._errors = params.pop('_errors', None) or {}
        self._destroyed = params.pop('_destroyed', False)
        self._status_code = None

        self.assign_attributes(self.scoped().apply_to(params))
        self.hooks.run('after_initialize', self)

    # Configuration

    @classmethod
    def method_for(cls, action):
        return cls.meta.method_for[action]

    @classmethod
    def add_hook(cls, name, hook):
        """
        Adds a hook to this class; ``hook`` is a method name or a callable receiving the resource.
        """
        cls.hooks.add(name, hook)

    @classmethod
    def add_association(cls, name, association):
        cls.associations[name] = association.attach(cls, name)
        setattr(cls, name, association)

    @classmethod
    def scoped(cls):
        """
        Returns a new :class:`Relation` with the default scope applied.
        """
        relation = Relation(cls)
        default_scope = cls.meta.default_scope
        if callable(default_scope):
            return default_scope(relation)
        if default_scope:
            return relation.where(**default_scope)
        return relation

    @classmethod
    def build_request_path(cls, params=None, path=None):
        """
        Resolves ``path``, or the collection or resource path depending on whether ``params`` holds a primary key.

        :raises PathError: when a placeholder cannot be resolved
        """
        params = params or {}
        return build_path(path or cls.paths.for_params(params), params)

    def request_path(self, params=None):
        merged = self._attributes.as_dict()
        merged.update(params or {})
        return type(self).build_request_path(merged)

    # Queries

    @classmethod
    def all(cls, **params):
        return cls.scoped().where(**params)

    @classmethod
    def where(cls, **params):
        return cls.scoped().where(**params)

    @classmethod
    def find(cls, *ids, **params):
        return cls.scoped().find(*ids, **params)

    @classmethod
    def find_by(cls, **params):
        return cls.scoped().find_by(**params)

    @classmethod
    def find_or_create_by(cls, **attributes):
        return cls.scoped().find_or_create_by(**attributes)

    @classmethod
    def find_or_initialize_by(cls, **attributes):
        return cls.scoped().find_or_initialize_by(**attributes)

    @classmethod
    def first_or_create(cls, **attributes):
        return cls.scoped().first_or_create(**attributes)

    @classmethod
    def first_or_initialize(cls, **attributes):
        return cls.scoped().first_or_initialize(**attributes)

    @classmethod
    def create(cls, **attributes):
        return cls.scoped().create(**attributes)

    @classmethod
    def build(cls, **attributes):
        """
        Returns a new, unsaved resource. With ``Meta.request_new_object_on_build``, the defaults of the new resource
        are requested from ``{collection_path}/new``.
        """
        if not cls.meta.request_new_object_on_build:
            return cls(attributes)

        path_params = dict(attributes)
        path_params[cls.meta.primary_key] = 'new'
        path = cls.build_request_path(path_params)
        envelope, response = cls.request(cls.method_for('new'), path, attributes)
        if not response.ok:
            log.debug('Cannot build %s: %s', cls.__name__, response.status_code)
            return None
        return cls.instantiate_record(envelope)

    @classmethod
    def save_existing(cls, id, **params):
        """
        Saves attributes of a resource without fetching it first.
        """
        params[cls.meta.primary_key] = id
        resource = cls(params)
        resource.save()
        return resource

    @classmethod
    def destroy_existing(cls, id, **params):
        """
        Destroys a resource without fetching it first.

        :return: a resource with the returned data; :attr:`destroyed` reflects the response status
        """
        path_params = dict(params)
        path_params[cls.meta.primary_key] = id
        path = cls.build_request_path(path_params)
        envelope, response = cls.request(cls.method_for('destroy'), path, params)

        data = cls.load_attributes(envelope['data']) if envelope['data'] else {}
        data.setdefault(cls.meta.primary_key, id)
        resource = cls(data,
                       _metadata=envelope['metadata'],
                       _errors=envelope['errors'],
                       _destroyed=response.ok)
        resource._attributes.clear_changes()
        return resource

    # Requests

    @classmethod
    def request(cls, method, path=None, params=None, headers=None):
        """
        Sends a request from this class's :class:`Api`.

        Without a ``path``, the collection or resource path is resolved from ``params``. A path starting with ``/``
        is a path template; any other path is relative to the request path for ``params``. Parameters used for
        placeholders are not repeated in the query string of ``GET`` and ``HEAD`` requests.

        :return: a tuple ``(envelope, response)``
        """
        if cls.api is None:
            raise RuntimeError('{} is not added to an Api.'.format(cls.__name__))

        params = dict(params or {})
        if path is None:
            template = cls.paths.for_params(params)
        elif path.startswith('/'):
            template = path
        elif '://' in path:
            template = None
        else:
            template = '{}/{}'.format(cls.paths.for_params(params).rstrip('/'), path)

        if template is not None:
            path = build_path(template, params)
            if method.upper() in ('GET', 'HEAD'):
                consumed = consumed_parameters(template)
                params = {key: value for key, value in params.items() if key not in consumed}

        return cls.api.request(method, path, params, headers)

    @classmethod
    def instantiate_record(cls, envelope):
        """
        Creates a persisted resource from a response envelope and runs the ``after_find`` hooks.
        """
        data = envelope['data']
        if isinstance(data, cls):
            return data

        resource = cls(cls.load_attributes(data) if data else {},
                       _metadata=envelope.get('metadata'),
                       _errors=envelope.get('errors'))
        resource._attributes.clear_changes()
        cls.hooks.run('after_find', resource)
        return resource

    @classmethod
    def instantiate_collection(cls, envelope):
        data = cls.extract_array(envelope)
        if isinstance(data, Collection):
            return data
        if not isinstance(data, list):
            data = [data] if data else []

        items = [cls.instantiate_record({'data': item, 'metadata': {}, 'errors': {}}) for item in data]
        return Collection(items,
                          metadata=envelope.get('metadata'),
                          errors=envelope.get('errors'),
                          resource=cls)

    @classmethod
    def load_attributes(cls, data):
        """
        Unwraps response data and converts the values of declared fields.
        """
        attributes = cls.parse(data)
        if not isinstance(attributes, dict):
            return {}
        if cls.schema is not None:
            attributes = cls.schema.convert(attributes)
        return attributes

    @classmethod
    def get_raw(cls, path=None, **params):
        return cls.request('GET', path, params)

    @classmethod
    def get_collection(cls, path=None, **params):
        envelope, response = cls.get_raw(path, **params)
        return cls.instantiate_collection(envelope)

    @classmethod
    def get_resource(cls, path=None, **params):
        envelope, response = cls.get_raw(path, **params)
        return cls.instantiate_record(envelope)

    @classmethod
    def get(cls, path=None, **params):
        """
        Sends a ``GET`` request and returns a :class:`Collection` for array data or a resource otherwise.

        >>> User.get('popular')  # GET /users/popular
        """
        envelope, response = cls.get_raw(path, **params)
        if isinstance(cls.extract_array(envelope), list):
            return cls.instantiate_collection(envelope)
        return cls.instantiate_record(envelope)

    # Parsing

    @classmethod
    def root_element(cls):
        root = cls.meta.root_element or cls.meta.name
        if cls.meta.parse_root_format == 'json_api':
            return pluralize(root)
        return root

    @classmethod
    def _root_key(cls, option):
        value = cls.meta.get(option)
        if not value:
            return None
        if value is True:
            return cls.root_element()
        return value

    @classmethod
    def parse(cls, data):
        """
        Unwraps the attributes of a single resource from response data.
        """
        root = cls._root_key('parse_root_in_json')
        if root is not None and isinstance(data, dict) and isinstance(data.get(root), (dict, list)):
            data = data[root]
            if cls.meta.parse_root_format == 'json_api' and isinstance(data, list):
                data = data[0] if data else {}
        return data

    @classmethod
    def extract_array(cls, envelope):
        data = envelope['data']
        if isinstance(data, dict) and cls.meta.parse_root_in_json and \
                cls.meta.parse_root_format in ('active_model_serializers', 'json_api'):
            root = cls.meta.parse_root_in_json
            if root is True:
                root = cls.meta.root_element or cls.meta.name
            return data.get(pluralize(root), data)
        return data

    @classmethod
    def wrap_params(cls, attributes, changes=None):
        """
        Builds a request body from serialized attributes.
        """
        if changes is not None and cls.api is not None and cls.api.config['POTION_SEND_ONLY_MODIFIED_ATTRIBUTES']:
            attributes = {key: value for key, value in attributes.items() if key in changes}

        root = cls._root_key('include_root_in_json')
        if root is None:
            return attributes
        if cls.meta.parse_root_format == 'json_api':
            return {root: [attributes]}
        return {root: attributes}

    @classmethod
    def parse_associations(cls, data):
        """
        Replaces embedded association data with resources of the association targets.
        """
        for name, association in cls.associations.items():
            value = data.get(association.data_key)
            if value is None:
                continue
            if association.data_key != name:
                data.pop(association.data_key)
            data[name] = association.parse(value)
        return data

    def serializable_attributes(self):
        cls = type(self)
        associations = cls.associations
        data_keys = {association.data_key for association in associations.values()}

        attributes = {}
        for key, value in self._attributes.items():
            if key in associations or key in data_keys:
                continue
            if isinstance(value, Resource):
                value = value.serializable_attributes()
            attributes[key] = value

        if cls.schema is not None:
            for key, field in cls.schema.fields.items():
                attributes.pop(field.attribute or key, None)
            attributes.update(cls.schema.format(self._attributes.as_dict(), update=not self.is_new()))

        for name, association in associations.items():
            value = self._attributes.get(name)
            if isinstance(value, (Collection, list, tuple)):
                value = [item.serializable_attributes() if isinstance(item, Resource) else item for item in value]
            elif isinstance(value, Resource):
                value = value.serializable_attributes()
            if not is_blank(value):
                attributes[association.data_key] = value
        return attributes

    def to_params(self):
        """
        Returns the request body sent by :meth:`save`.
        """
        return type(self).wrap_params(self.serializable_attributes(), self._attributes.changes)

    # Attributes

    @classmethod
    def _setter_for(cls, name):
        for klass in cls.__mro__:
            if name in klass.__dict__:
                if klass is Resource:
                    return None
                attribute = klass.__dict__[name]
                if isinstance(attribute, property):
                    return attribute if attribute.fset is not None else None
                if hasattr(type(attribute), '__set__'):
                    return attribute
                return None
        return None

    def assign_attributes(self, attributes):
        """
        Assigns a dictionary of attributes.

        Keys with a setter (a declared field, a property, a nested attributes setter or an association given a
        resource) are assigned through it. Other keys are set as attributes, except the primary key and association
        data, which are parsed and stored without change tracking.
        """
        cls = type(self)
        associations = cls.associations
        reserved = {cls.meta.primary_key, 'id'}
        reserved.update(association.data_key for association in associations.values())

        remainder = {}
        for key, value in attributes.items():
            if key in associations or key in reserved:
                if cls._setter_for(key) is not None and _use_setter(key in associations, value):
                    setattr(self, key, value)
                else:
                    remainder[key] = value
            elif cls._setter_for(key) is not None:
                setattr(self, key, value)
            else:
                self.set_attribute(key, value)

        self._attributes.update(cls.parse_associations(remainder))

    def get_attribute(self, name, default=None):
        return self._attributes.get(name, default)

    def set_attribute(self, name, value):
        self._attributes.set(name, value)

    def has_attribute(self, name):
        return self._attributes.has(name)

    def attribute_present(self, name):
        return not is_blank(self._attributes.get(name))

    @property
    def attributes(self):
        return self._attributes.as_dict()

    @property
    def changes(self):
        return self._attributes.changes

    @property
    def previous_changes(self):
        return self._attributes.previous_changes

    @property
    def changed(self):
        return self._attributes.changed

    def is_changed(self, name=None):
        if name is None:
            return bool(self._attributes.changed)
        return self._attributes.is_changed(name)

    @property
    def id(self):
        return self._attributes.get(self.meta.primary_key)

    @id.setter
    def id(self, value):
        self.set_attribute(self.meta.primary_key, value)

    @property
    def metadata(self):
        return self._metadata

    @metadata.setter
    def metadata(self, value):
        self._metadata = value

    @property
    def errors(self):
        return self._errors

    @errors.setter
    def errors(self, value):
        self._errors = value

    def __getattr__(self, name):
        if name.startswith('__'):
            raise AttributeError(name)

        attributes = self.__dict__.get('_attributes')
        if attributes is not None and attributes.has(name):
            return attributes.get(name)

        inverse = self.__dict__.get('_inverse')
        if inverse and name in inverse:
            resource = inverse[name]()
            if resource is not None:
                return resource

        raise UnknownAttribute(self, name)

    def __setattr__(self, name, value):
        if name.startswith('_') or hasattr(type(self), name):
            object.__setattr__(self, name, value)
        else:
            self.set_attribute(name, value)

    def toggle(self, name):
        self._attributes.set(name, not self.attribute_present(name))
        return self

    def increment(self, name, by=1):
        self._attributes.set(name, (self._attributes.get(name) or 0) + by)
        return self

    def decrement(self, name, by=1):
        return self.increment(name, -by)

    # Associations

    def association(self, name):
        """
        Returns the association object of ``name``, for example to query it with parameters.

        :raises AssociationUnknownError: if no association of that name is declared
        """
        try:
            association = type(self).associations[name]
        except KeyError:
            raise AssociationUnknownError(type(self), name)
        return association.bound(self)

    @classmethod
    def has_association(cls, name):
        return name in cls.associations

    # Lifecycle

    def is_new(self):
        return self.id is None

    @property
    def persisted(self):
        return not self.is_new() and not self._destroyed

    @property
    def destroyed(self):
        return self._destroyed

    def _merge_response(self, envelope, response):
        cls = type(self)
        if envelope['data']:
            self.assign_attributes(cls.load_attributes(envelope['data']))
        self._metadata = envelope['metadata']
        self._errors = envelope['errors']
        self._status_code = response.status_code

    def save(self):
        """
        Creates or updates the resource.

        :return: the resource, or ``False`` if the request failed or the API returned errors
        """
        cls = type(self)
        events = ('create', 'save') if self.is_new() else ('update', 'save')
        method = cls.method_for(events[0])

        cls.hooks.run_before(self, *events)
        envelope, response = cls.request(method, self.request_path(), self.to_params())
        self._merge_response(envelope, response)

        if not response.ok or not is_blank(self._errors):
            log.debug('Cannot save %r: %s %r', self, response.status_code, self._errors)
            return False

        self._attributes.apply_changes()
        cls.hooks.run_after(self, *events)
        return self

    def save_or_raise(self):
        """
        Like :meth:`save`, but raises :class:`ResourceInvalid` instead of returning ``False``.
        """
        if self.save() is False:
            raise ResourceInvalid(self, status_code=self._status_code)
        return self

    def destroy(self, **params):
        cls = type(self)
        cls.hooks.run_before(self, 'destroy')
        envelope, response = cls.request(cls.method_for('destroy'), self.request_path(), params)
        self._merge_response(envelope, response)
        self._destroyed = response.ok
        cls.hooks.run_after(self, 'destroy')
        return self

    def reload(self):
        """
        Fetches the resource again and replaces its attributes.
        """
        fresh = type(self).find(self.id)
        if fresh is not None:
            self._attributes = fresh._attributes
            self._associations = {}
            self._metadata = fresh.metadata
            self._errors = fresh.errors
        return self

    def validate(self):
        """
        Validates the declared fields with the JSON-schema of the resource.

        :return: a dictionary of lists of error messages keyed by property name; empty if valid
        """
        if self.schema is None:
            return {}
        return self.schema.validate(self._attributes.as_dict(), update=not self.is_new())

    def is_valid(self):
        return not self.validate() and is_blank(self._errors)

    def is_invalid(self):
        return not self.is_valid()

    # Serialization

    def to_dict(self, only=None, exclude=None, methods=None):
        result = {}
        for key, value in self._attributes.items():
            if only is not None and key not in only:
                continue
            if exclude is not None and key in exclude:
                continue
            result[key] = _serialize(value)

        for name in methods or ():
            value = getattr(self, name)
            result[name] = _serialize(value() if callable(value) else value)
        return result

    def to_json(self, **kwargs):
        return json.dumps(self.to_dict(**kwargs))

    def __eq__(self, other):
        return type(other) is type(self) and self._attributes == other._attributes

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((type(self), self._attributes.freeze()))

    def __repr__(self):
        cls = type(self)
        path = cls.paths.collection_path
        if self.id is not None:
            path = '{}/{}'.format(path.rstrip('/'), self.id)
        attributes = ' '.join('{}={}'.format(key, _inspect_value(value)) for key, value in self._attributes.items())
        if attributes:
            return '<{}({}) {}>'.format(cls.__name__, path, attributes)
        return '<{}({})>'.format(cls.__name__, path)


def _use_setter(is_association, value):
    if not is_association:
        return True
    if isinstance(value, dict) or value is None:
        return False
    if isinstance(value, (list, tuple)) and not isinstance(value, Collection):
        return any(not isinstance(item, dict) for item in value)
    return True


def _serialize(value):
    if isinstance(value, Resource):
        return value.to_dict()
    if isinstance(value, (Collection, list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return value


def _inspect_value(value):
    if isinstance(value, str) and len(value) > 50:
        return repr('{}...'.format(value[:50]))
    if isinstance(value, (date, datetime)):
        return '"{}"'.format(value.isoformat())
    return repr(value)


def _http_method(method, result=None):
    def request(cls, path=None, **params):
        envelope, response = cls.request(method, path, params)
        if result == 'raw':
            return envelope, response
        if result == 'collection':
            return cls.instantiate_collection(envelope)
        if result == 'resource' or not isinstance(cls.extract_array(envelope), list):
            return cls.instantiate_record(envelope)
        return cls.instantiate_collection(envelope)

    request.__name__ = '{}{}'.format(method.lower(), '_{}'.format(result) if result else '')
    request.__doc__ = 'Sends a ``{}`` request; see :meth:`Resource.request` for paths.'.format(method)
    return classmethod(request)


for _method in ('POST', 'PUT', 'PATCH', 'DELETE'):
    setattr(Resource, _method.lower(), _http_method(_method))
    for _result in ('raw', 'collection', 'resource'):
        setattr(Resource, '{}_{}'.format(_method.lower(), _result), _http_method(_method, _result))

del _method, _result


class JsonApiResourceMeta(ResourceMeta):

    @staticmethod
    def _check_meta(class_, meta, changes):
        for option in ('parse_root_in_json', 'include_root_in_json', 'root_element', 'primary_key'):
            if option in changes:
                raise RuntimeError('{}: "{}" is not supported by JSON:API resources.'.format(class_.__name__, option))

        if not changes.get('type'):
            meta['type'] = tableize(class_.__name__)


class JsonApiResource(Resource, metaclass=JsonApiResourceMeta):
    """
    A resource of an API following the `JSON:API <http://jsonapi.org/>`_ format. Use with
    :class:`middleware.JsonApiParser`.

    Resource objects are parsed from their ``attributes`` and ``id``; request bodies are resource objects of the
    type ``Meta.type``, which defaults to the tableized class name. Updates use ``PATCH``.
    """

    class Meta:
        type = None
        method_for = {
            'update': 'PATCH'
        }

    @classmethod
    def parse(cls, data):
        if not isinstance(data, dict):
            return data
        attributes = dict(data.get('attributes') or {})
        if 'id' in data:
            attributes['id'] = data['id']
        return attributes

    @classmethod
    def wrap_params(cls, attributes, changes=None):
        if changes is not None and cls.api is not None and cls.api.config['POTION_SEND_ONLY_MODIFIED_ATTRIBUTES']:
            attributes = {key: value for key, value in attributes.items() if key in changes or key == 'id'}

        attributes = dict(attributes)
        data = {'type': cls.meta.type}
        id = attributes.pop('id', None)
        if id is not None:
            data['id'] = id
        data['attributes'] = attributes
        return {'data': data}
