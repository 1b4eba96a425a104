from collections.abc import Sequence
from functools import partial
from itertools import chain
import logging

log = logging.getLogger(__name__)

_UNLOADED = object()


class Relation(Sequence):
    """
    A lazy, chainable query of a resource collection.

    Chaining methods such as :meth:`where` return new relations and never change the relation they are called on.
    The request is performed when the relation is first read (iterated, indexed, measured or compared) and the
    resulting :class:`Collection` is kept by this relation.

    Names of scopes declared on the resource can be called on a relation:

    .. code-block:: python

        User.where(active=1).admins().page(2)

    :param resource: the resource class
    :param dict params: query parameters
    """

    def __init__(self, resource, params=None):
        self.resource = resource
        self.params = dict(params or {})
        self._collection = _UNLOADED

    def where(self, **params):
        merged = dict(self.params)
        merged.update(params)
        return Relation(self.resource, merged)

    all = where

    def apply_to(self, attributes):
        """
        Returns the query parameters merged with ``attributes``; explicit attributes take precedence.
        """
        merged = dict(self.params)
        merged.update(attributes or {})
        return merged

    def build(self, **attributes):
        return self.resource.build(**self.apply_to(attributes))

    def create(self, **attributes):
        """
        Instantiates a resource with the query parameters and ``attributes`` and saves it.

        :return: the resource, whether or not it was saved; see :attr:`Resource.errors`
        """
        resource = self.resource(self.apply_to(attributes))
        resource.save()
        return resource

    def _request(self):
        resource = self.resource
        return resource.request(resource.method_for('find'), None, self.params)

    def load(self, envelope, response=None):
        self._collection = self.resource.instantiate_collection(envelope)
        return self._collection

    def fetch(self):
        if self._collection is _UNLOADED:
            envelope, response = self._request()
            self.load(envelope, response)
        return self._collection

    def reload(self):
        self._collection = _UNLOADED
        return self.fetch()

    def find(self, *ids, **params):
        """
        Fetches resources by primary key, with one request per distinct id.

        Returns a single resource (or ``None`` when the request failed) for a single id, and a list otherwise.

        >>> User.find(1)
        >>> User.find(1, 2)
        >>> User.find([1, 2], active=1)
        """
        resource = self.resource
        primary_key = resource.meta.primary_key

        flattened = list(chain.from_iterable(i if isinstance(i, (list, tuple)) else (i,) for i in ids))
        distinct = []
        for id in flattened:
            if id is not None and id not in distinct:
                distinct.append(id)

        results = []
        for id in distinct:
            request_params = self.apply_to(params)
            request_params[primary_key] = id
            envelope, response = resource.request(resource.method_for('find'), None, request_params)
            if response.ok:
                results.append(resource.instantiate_record(envelope))
            else:
                log.debug('Cannot find %s %r: %s', resource.__name__, id, response.status_code)
                results.append(None)

        if len(ids) > 1 or any(isinstance(i, (list, tuple)) for i in ids):
            return results
        return results[0] if results else None

    def find_by(self, **params):
        return self.where(**params).first

    def find_or_create_by(self, **attributes):
        return self.find_by(**attributes) or self.create(**attributes)

    def find_or_initialize_by(self, **attributes):
        return self.find_by(**attributes) or self.build(**attributes)

    def first_or_create(self, **attributes):
        return self.fetch().first or self.create(**attributes)

    def first_or_initialize(self, **attributes):
        return self.fetch().first or self.build(**attributes)

    @property
    def first(self):
        return self.fetch().first

    @property
    def last(self):
        return self.fetch().last

    @property
    def metadata(self):
        return self.fetch().metadata

    @property
    def errors(self):
        return self.fetch().errors

    def count(self):
        return len(self.fetch())

    def to_list(self):
        return list(self.fetch())

    def __getitem__(self, index):
        return self.fetch()[index]

    def __len__(self):
        return len(self.fetch())

    def __iter__(self):
        return iter(self.fetch())

    def __eq__(self, other):
        if isinstance(other, Relation):
            return self.resource is other.resource and self.params == other.params
        return self.fetch() == other

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        scopes = self.resource.scopes or {}
        if name in scopes:
            return partial(scopes[name].fn, self)
        raise AttributeError("'Relation' of {} has no attribute or scope '{}'".format(self.resource.__name__, name))

    def __repr__(self):
        return '<Relation {} {!r}>'.format(self.resource.__name__, self.params)


class Scope(object):
    """
    A named, reusable query of a resource. The function receives a :class:`Relation` and returns a new one.
    """

    def __init__(self, fn):
        self.fn = fn
        self.attribute = None

    def __get__(self, instance, owner):
        return partial(self.fn, owner.scoped())


def scope(fn):
    """
    Declares a scope on a resource:

    .. code-block:: python

        class User(Resource):
            @scope
            def admins(relation):
                return relation.where(admin=1)

        User.admins()  # GET /users?admin=1
    """
    return Scope(fn)
