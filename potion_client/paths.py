import re
from urllib.parse import quote

from .exceptions import PathError

PLACEHOLDER_PATTERN = re.compile(r':(\w+)')


def path_parameters(template):
    """
    Returns the names of all placeholders in a path template, in order of appearance.

    >>> path_parameters('/users/:user_id/comments/:id')
    ['user_id', 'id']
    """
    return PLACEHOLDER_PATTERN.findall(template)


def _lookup(params, name):
    for key in (name, '_{}'.format(name)):
        value = params.get(key)
        if value is not None:
            return value
    return None


def build_path(template, params=None):
    """
    Resolves a path template such as ``/users/:user_id/comments`` against a dictionary of parameters.

    Each ``:name`` placeholder is replaced with ``params[name]``. If that is missing, ``params['_name']`` is
    used instead, which allows a path parameter to share its name with an unrelated attribute.

    :param str template: path template
    :param dict params: parameters
    :raises PathError: if a placeholder has no matching parameter
    :return: the resolved path
    """
    params = params or {}

    def replace(match):
        name = match.group(1)
        value = _lookup(params, name)
        if value is None:
            raise PathError('Missing :_{} parameter to build the request path ({}).'.format(name, template),
                            missing_parameter=name)
        return quote(str(value), safe='')

    return PLACEHOLDER_PATTERN.sub(replace, template)


def consumed_parameters(template):
    """
    Returns the parameter keys that can satisfy the placeholders of ``template``.
    """
    keys = set()
    for name in path_parameters(template):
        keys.add(name)
        keys.add('_{}'.format(name))
    return keys


class PathSet(object):
    """
    The collection and resource path templates of a resource class.

    Setting :attr:`collection_path` resets :attr:`resource_path` to ``{collection_path}/:{primary_key}`` unless a
    resource path is set afterwards.

    :param str collection_path: collection path template
    :param str resource_path: optional resource path template
    :param str primary_key: name of the primary key attribute
    """

    def __init__(self, collection_path, resource_path=None, primary_key='id'):
        self.primary_key = primary_key
        self._resource_path = None
        self.collection_path = collection_path
        if resource_path is not None:
            self.resource_path = resource_path

    @property
    def collection_path(self):
        return self._collection_path

    @collection_path.setter
    def collection_path(self, path):
        self._collection_path = path
        self._resource_path = None

    @property
    def resource_path(self):
        if self._resource_path is None:
            return '{}/:{}'.format(self._collection_path.rstrip('/'), self.primary_key)
        return self._resource_path

    @resource_path.setter
    def resource_path(self, path):
        if self.primary_key != 'id' and path is not None:
            path = re.sub(r'(^|/):id(?=$|/)', r'\1:{}'.format(self.primary_key), path)
        self._resource_path = path

    def copy(self):
        paths = PathSet(self._collection_path, primary_key=self.primary_key)
        paths._resource_path = self._resource_path
        return paths

    def for_params(self, params):
        """
        Selects the resource path when ``params`` contains a primary key value, the collection path otherwise.
        """
        value = params.get(self.primary_key) if params else None
        if value is not None and not isinstance(value, (list, tuple)):
            return self.resource_path
        return self.collection_path

    def build(self, params=None):
        return build_path(self.for_params(params or {}), params)

    def __repr__(self):
        return '<PathSet collection={!r} resource={!r}>'.format(self.collection_path, self.resource_path)
