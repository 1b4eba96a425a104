import copy
import logging
from urllib.parse import quote
import weakref

from werkzeug.utils import cached_property

from .collection import Collection
from .exceptions import PathError
from .reference import ResourceReference, ResourceBound
from .utils import classify, is_blank, singularize

log = logging.getLogger(__name__)

_MISSING = object()


class Association(ResourceBound):
    """
    The base class of association declarations. Associations are declared as attributes of a resource class; the
    name of the attribute is the name of the association.

    :param target: a resource reference, see :meth:`ResourceReference.resolve`; defaults to the class name derived
        from the association name
    :param str data_key: key of embedded association data in responses; defaults to the association name
    :param str path: path template of the association
    :param default: value returned when the association is known to be absent
    """
    kind = None

    def __init__(self, target=None, data_key=None, path=None, default=None):
        self.attribute = None
        self._target = target
        self._data_key = data_key
        self._path = path
        self._default = default

    def attach(self, resource, name):
        if self.attribute is None:
            self.attribute = name
        return self.bind(resource)

    def rebind(self, resource):
        # declarations are shared with subclasses
        return self

    @property
    def name(self):
        return self.attribute

    @property
    def data_key(self):
        return self._data_key or self.attribute

    @property
    def path(self):
        return self._path

    def _default_target(self):
        return classify(self.attribute)

    @cached_property
    def target(self):
        return ResourceReference(self._target or self._default_target()).resolve(self.resource)

    @property
    def default(self):
        return copy.copy(self._default)

    def bound(self, instance):
        try:
            return instance._associations[self.name]
        except KeyError:
            association = instance._associations[self.name] = self.bound_class(self, instance)
            return association

    def parse(self, value):
        """
        Materializes embedded association data as instances of the target resource.
        """
        raise NotImplementedError()

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return self.bound(instance).fetch()

    def __set__(self, instance, value):
        target = self.target
        if isinstance(value, dict):
            value = target(value)
        instance._attributes.set(self.name, value)

    def __repr__(self):
        return '{}({!r}, target={!r})'.format(self.__class__.__name__, self.attribute, self._target)


class BoundAssociation(object):
    """
    An association of one resource instance. Resolves the associated resources lazily.

    Without extra parameters, the resolved value is stored in the parent's attributes and later returned without a
    request. An attribute that is present but ``None`` or empty means the association is known to be absent.
    Resolving with extra parameters, see :meth:`where`, always performs a request and is never stored.
    """

    def __init__(self, association, parent, params=None):
        self.association = association
        self.parent = parent
        self.params = dict(params or {})
        self._result = _MISSING

    @property
    def name(self):
        return self.association.name

    @property
    def target(self):
        return self.association.target

    def where(self, **params):
        """
        Returns a copy of this association that adds query parameters to the request.

        >>> user.association('comments').where(approved=1)  # GET /users/1/comments?approved=1
        """
        merged = dict(self.params)
        merged.update(params)
        return self.__class__(self.association, self.parent, merged)

    all = where

    def fetch(self):
        if self.params:
            if self._result is _MISSING:
                self._result = self._fetch()
                if self._result is _MISSING:
                    self._result = self.association.default
            return self._result

        attributes = self.parent._attributes
        if attributes.has(self.name):
            value = attributes.get(self.name)
            if not is_blank(value):
                return value
            return self.association.default

        value = self._fetch()
        if value is _MISSING:
            return self.association.default

        attributes.write(self.name, value)
        return value

    def _fetch(self):
        raise NotImplementedError()

    def _build_path(self, build):
        try:
            return build()
        except PathError as e:
            if self.params:
                raise
            log.debug('Cannot resolve association "%s" of %r: %s', self.name, self.parent, e)
            return None

    def _nested_path(self):
        return '{}{}'.format(self.parent.request_path(self.params), self.association.path)

    def reset(self):
        self._result = _MISSING
        self.parent._attributes.pop(self.name)

    def reload(self):
        self.reset()
        return self.fetch()

    def assign_nested_attributes(self, attributes):
        target = self.target
        current = self.parent._attributes.get(self.name)
        if is_blank(current):
            self.parent._attributes.write(self.name, target(target.parse(attributes)))
        else:
            current.assign_attributes(attributes)

    def __repr__(self):
        return '<{} {}.{} params={!r}>'.format(self.__class__.__name__,
                                               self.parent.__class__.__name__,
                                               self.name,
                                               self.params)


class BelongsToAssociation(BoundAssociation):

    def fetch(self):
        # back references are weak and never stored in the attribute bag
        if not self.params and not self.parent._attributes.has(self.name):
            reference = self.parent._inverse.get(self.name)
            resource = reference() if reference is not None else None
            if resource is not None:
                return resource
        return super(BelongsToAssociation, self).fetch()

    def _fetch(self):
        parent = self.parent

        foreign_key_value = parent._attributes.get(self.association.foreign_key)
        if is_blank(foreign_key_value):
            return _MISSING

        target = self.target
        path_params = parent._attributes.as_dict()
        path_params.update(self.params)
        path_params[target.meta.primary_key] = foreign_key_value

        def build():
            return target.build_request_path(path_params, path=self.association.path)

        path = self._build_path(build)
        if path is None:
            return _MISSING
        return target.get_resource(path, **self.params)

    def build(self, **attributes):
        return self.target.build(**attributes)

    def create(self, **attributes):
        resource = self.build(**attributes)
        resource.save()
        self.parent._attributes.write(self.name, resource)
        self.parent._attributes.set(self.association.foreign_key, resource.id)
        return resource


class HasOneAssociation(BoundAssociation):

    def _fetch(self):
        if self.parent.is_new():
            return _MISSING

        path = self._build_path(self._nested_path)
        if path is None:
            return _MISSING
        return self.target.get_resource(path, **self.params)

    def build(self, **attributes):
        attributes['{}_id'.format(self.parent.meta.name)] = self.parent.id
        return self.target.build(**attributes)

    def create(self, **attributes):
        resource = self.build(**attributes)
        resource.save()
        self.parent._attributes.write(self.name, resource)
        return resource


class HasManyAssociation(BoundAssociation):
    """
    A lazy sequence of associated resources. Iterating, indexing or measuring the association resolves it.
    """

    def _fetch(self):
        parent = self.parent
        if parent.is_new():
            return _MISSING

        target = self.target
        if any(value == [] for value in self.params.values()):
            return Collection(resource=target)

        path = self._build_path(self._nested_path)
        if path is None:
            return _MISSING

        collection = target.get_collection(path, **self.params)
        inverse_of = self.association.inverse_of or parent.meta.name
        for item in collection:
            item._inverse[inverse_of] = weakref.ref(parent)
        return collection

    def find(self, id):
        if is_blank(id):
            return None

        def build():
            return '{}/{}'.format(self._nested_path(), quote(str(id), safe=''))

        path = self._build_path(build)
        if path is None:
            return None
        return self.target.get_resource(path, **self.params)

    def build(self, **attributes):
        attributes['{}_id'.format(self.parent.meta.name)] = self.parent.id
        return self.target.build(**attributes)

    def create(self, **attributes):
        resource = self.build(**attributes)

        if resource.save():
            current = self.parent._attributes.get(self.name)
            if not isinstance(current, Collection):
                current = Collection(resource=self.target)
            self.parent._attributes.write(self.name, current.appended(resource))

        return resource

    def assign_nested_attributes(self, attributes):
        data = list(attributes.values()) if isinstance(attributes, dict) else list(attributes)
        self.parent._attributes.write(self.name, self.target.instantiate_collection({'data': data}))

    @property
    def first(self):
        return self.fetch().first

    @property
    def last(self):
        return self.fetch().last

    def count(self):
        return len(self.fetch())

    def to_list(self):
        return list(self.fetch())

    def __iter__(self):
        return iter(self.fetch())

    def __len__(self):
        return len(self.fetch())

    def __getitem__(self, index):
        return self.fetch()[index]

    def __eq__(self, other):
        return self.fetch() == other

    def __ne__(self, other):
        return not self == other

    __hash__ = None


class BelongsTo(Association):
    """
    An association with the resource referenced by a foreign key of this resource.

    Without a ``path``, the target's resource path is used with the foreign key value as primary key.

    :param str foreign_key: attribute holding the primary key of the target; default: ``{name}_id``
    """
    kind = 'belongs_to'
    bound_class = BelongsToAssociation

    def __init__(self, target=None, foreign_key=None, **kwargs):
        super(BelongsTo, self).__init__(target, **kwargs)
        self._foreign_key = foreign_key

    @property
    def foreign_key(self):
        return self._foreign_key or '{}_id'.format(self.attribute)

    def parse(self, value):
        target = self.target
        if isinstance(value, target) or not isinstance(value, dict):
            return value
        if not value:
            return None
        return target.instantiate_record({'data': value})


class HasOne(Association):
    """
    An association with a single resource nested under this resource, by default at ``/{name}``.
    """
    kind = 'has_one'
    bound_class = HasOneAssociation

    @property
    def path(self):
        return self._path or '/{}'.format(self.attribute)

    def parse(self, value):
        target = self.target
        if isinstance(value, target) or not isinstance(value, dict):
            return value
        if not value:
            return None
        return target.instantiate_record({'data': value})


class HasMany(Association):
    """
    An association with the collection of resources nested under this resource, by default at ``/{name}``.

    The resources resolved with a request hold a reference back to this resource; the back reference is named
    ``inverse_of`` and defaults to the name of this resource.

    :param str inverse_of: name of the back reference
    """
    kind = 'has_many'
    bound_class = HasManyAssociation

    def __init__(self, target=None, inverse_of=None, **kwargs):
        kwargs.setdefault('default', Collection())
        super(HasMany, self).__init__(target, **kwargs)
        self.inverse_of = inverse_of

    def _default_target(self):
        return classify(singularize(self.attribute))

    @property
    def path(self):
        return self._path or '/{}'.format(self.attribute)

    @property
    def default(self):
        default = self._default
        if isinstance(default, Collection) and default.resource is None and not default:
            return Collection(resource=self.target)
        return copy.copy(default)

    def parse(self, value):
        if isinstance(value, Collection):
            return value
        return self.target.instantiate_collection({'data': value})

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return self.bound(instance)

    def __set__(self, instance, value):
        target = self.target
        if isinstance(value, (list, tuple)):
            value = Collection([target(item) if isinstance(item, dict) else item for item in value],
                               resource=target)
        instance._attributes.set(self.name, value)


class NestedAttributesSetter(object):
    """
    Write-only ``{association}_attributes`` accessor assigning nested attributes to an association.
    """

    def __init__(self, association_name):
        self.association_name = association_name

    def __get__(self, instance, owner):
        if instance is None:
            return self
        raise AttributeError('{}_attributes is write-only'.format(self.association_name))

    def __set__(self, instance, value):
        instance.association(self.association_name).assign_nested_attributes(value)
