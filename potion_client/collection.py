from collections.abc import Sequence


class Collection(Sequence):
    """
    An ordered, immutable sequence of resources from one response, with the response's metadata and errors.

    :param items: resources, in response order
    :param dict metadata: response metadata
    :param errors: response errors
    :param resource: the resource class of the items; used by :meth:`build`
    """

    def __init__(self, items=(), metadata=None, errors=None, resource=None):
        self._items = tuple(items)
        self._metadata = metadata if metadata is not None else {}
        self._errors = errors if errors is not None else {}
        self.resource = resource

    @property
    def metadata(self):
        return self._metadata

    @property
    def errors(self):
        return self._errors

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Collection(self._items[index], self._metadata, self._errors, self.resource)
        return self._items[index]

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    @property
    def first(self):
        return self._items[0] if self._items else None

    @property
    def last(self):
        return self._items[-1] if self._items else None

    def build(self, **attributes):
        if self.resource is None:
            raise RuntimeError('Cannot build an item for a collection without a resource class.')
        return self.resource.build(**attributes)

    def appended(self, item):
        return Collection(self._items + (item,), self._metadata, self._errors, self.resource)

    def to_list(self):
        return list(self._items)

    def __eq__(self, other):
        if isinstance(other, Sequence) and not isinstance(other, str):
            return list(self._items) == list(other)
        return NotImplemented

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(self._items)

    def __repr__(self):
        return '<Collection {!r}>'.format(list(self._items))
