from .utils import freeze


_MISSING = object()


class AttributeStore(object):
    """
    The attribute values of a resource with change tracking.

    A key that is present with a ``None`` value is distinct from an absent key. Values assigned with :meth:`set` are
    tracked; values assigned with :meth:`write` are not. A tracked attribute that is set back to its original value
    is no longer changed.

    :param dict values: initial values; not tracked
    """

    def __init__(self, values=None):
        self._values = dict(values or {})
        self._original = {}
        self.previous_changes = {}

    def get(self, name, default=None):
        return self._values.get(name, default)

    def has(self, name):
        return name in self._values

    def set(self, name, value):
        current = self._values.get(name, _MISSING)

        if name in self._original:
            if self._original[name] is not _MISSING and self._original[name] == value:
                del self._original[name]
        elif current is _MISSING or current != value:
            self._original[name] = current

        self._values[name] = value

    def write(self, name, value):
        self._values[name] = value

    def pop(self, name, default=None):
        self._original.pop(name, None)
        return self._values.pop(name, default)

    def update(self, values):
        for name, value in values.items():
            self.write(name, value)

    @property
    def changes(self):
        """
        A dictionary of ``(old, new)`` tuples for every changed attribute.
        """
        return {name: (None if original is _MISSING else original, self._values.get(name))
                for name, original in self._original.items()}

    @property
    def changed(self):
        return list(self._original)

    def is_changed(self, name):
        return name in self._original

    def clear_changes(self):
        self._original.clear()

    def apply_changes(self):
        """
        Moves the current changes into :attr:`previous_changes`. Called after a successful save.
        """
        if self._original:
            self.previous_changes = self.changes
        self._original.clear()

    def freeze(self):
        return freeze(self._values)

    def as_dict(self):
        return dict(self._values)

    def keys(self):
        return self._values.keys()

    def items(self):
        return self._values.items()

    def __contains__(self, name):
        return name in self._values

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __eq__(self, other):
        if isinstance(other, AttributeStore):
            return self._values == other._values
        return self._values == other

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def __repr__(self):
        return 'AttributeStore({!r})'.format(self._values)


class FieldAttribute(object):
    """
    Accessor for a declared attribute of a resource.

    Reading an absent attribute returns the field's default value without storing it. Assigning a value is change
    tracked.

    :param str name: attribute name
    :param field: optional :class:`fields.Raw` instance
    """

    def __init__(self, name, field=None):
        self.name = name
        self.field = field

    def __get__(self, instance, owner):
        if instance is None:
            return self
        attributes = instance._attributes
        if attributes.has(self.name):
            return attributes.get(self.name)
        if self.field is not None:
            return self.field.default
        return None

    def __set__(self, instance, value):
        instance._attributes.set(self.name, value)

    def __repr__(self):
        return '<FieldAttribute {!r} {!r}>'.format(self.name, self.field)
