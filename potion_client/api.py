import logging
import os

import requests
from flask import json, Config

from .middleware import DefaultParseJSON

log = logging.getLogger(__name__)


def _format_query_value(value):
    if value is True:
        return 'true'
    if value is False:
        return 'false'
    if value is None:
        return ''
    return str(value)


def flatten_params(params, prefix=None):
    """
    Flattens nested query parameters into ``(key, value)`` pairs using the bracket notation.

    >>> flatten_params({'where': {'name': 'foo'}, 'ids': [1, 2]})
    [('where[name]', 'foo'), ('ids[]', '1'), ('ids[]', '2')]
    """
    pairs = []
    for key, value in params.items():
        name = key if prefix is None else '{}[{}]'.format(prefix, key)
        if isinstance(value, dict):
            pairs.extend(flatten_params(value, name))
        elif isinstance(value, (list, tuple)):
            for item in value:
                if isinstance(item, dict):
                    pairs.extend(flatten_params(item, '{}[]'.format(name)))
                else:
                    pairs.append(('{}[]'.format(name), _format_query_value(item)))
        else:
            pairs.append((name, _format_query_value(value)))
    return pairs


class Api(object):
    """
    A connection to a JSON API.

    Requests are prepared with a :class:`requests.Session`, passed through the ``process_request()`` methods of the
    middleware in order, sent, passed through the ``process_response()`` methods of the middleware in reverse order
    and finally turned into an envelope by the parser.

    :param str base_url: root URL of the API; defaults to the ``POTION_BASE_URL`` configuration value
    :param parser: a callable turning a :class:`requests.Response` into a ``{data, errors, metadata}`` envelope;
        default: :class:`middleware.DefaultParseJSON`
    :param list middleware: objects with optional ``process_request(request)`` and
        ``process_response(request, response)`` methods
    :param session: optional :class:`requests.Session`
    :param dict config: optional configuration values
    """

    def __init__(self, base_url=None, parser=None, middleware=None, session=None, config=None):
        self.config = Config(os.getcwd(), defaults=config)
        self.config.setdefault('POTION_BASE_URL', None)
        self.config.setdefault('POTION_DEFAULT_HEADERS', {})
        self.config.setdefault('POTION_REQUEST_TIMEOUT', None)
        self.config.setdefault('POTION_SEND_ONLY_MODIFIED_ATTRIBUTES', False)
        self.config.setdefault('POTION_MAX_WORKERS', 4)

        self._base_url = base_url
        self.parser = parser or DefaultParseJSON()
        self.middleware = list(middleware or [])
        self.session = session or requests.Session()
        self.resources = {}

    @property
    def base_url(self):
        return self._base_url or self.config['POTION_BASE_URL']

    def add_resource(self, resource):
        """
        Add a :class:`Resource` class to the API. Resources declaring ``Meta.api`` are added automatically.

        :param Resource resource: resource
        :return:
        """
        # prevent resources from being added twice
        if self.resources.get(resource.meta.name) is resource:
            return

        if resource.__dict__.get('api') is not None and resource.api is not self:
            raise RuntimeError("Attempted to register a resource that is already registered with a different Api.")

        resource.api = self
        self.resources[resource.meta.name] = resource

    def url_for(self, path):
        if path.startswith(('http://', 'https://')):
            return path
        if self.base_url is None:
            raise RuntimeError('No base URL has been configured; set POTION_BASE_URL or pass base_url to the Api.')
        return '{}/{}'.format(self.base_url.rstrip('/'), path.lstrip('/'))

    def request(self, method, path, params=None, headers=None):
        """
        Performs a request and parses the response.

        ``GET`` and ``HEAD`` requests send the parameters as query string, any other method sends them as a JSON
        body. Parameters whose key starts with ``_`` are never sent.

        :param str method: HTTP method
        :param str path: path relative to :attr:`base_url`, or an absolute URL
        :param dict params: request parameters
        :param dict headers: additional request headers
        :return: a tuple ``(envelope, response)``
        """
        method = method.upper()
        params = {key: value for key, value in (params or {}).items() if not str(key).startswith('_')}

        request_headers = dict(self.config['POTION_DEFAULT_HEADERS'])
        request_headers.update(headers or {})

        request = requests.Request(method, self.url_for(path), headers=request_headers)
        if method in ('GET', 'HEAD'):
            request.params = flatten_params(params)
        elif params or method != 'DELETE':
            request.data = json.dumps(params)
            request.headers['Content-Type'] = 'application/json'

        prepared = self.session.prepare_request(request)
        for middleware in self.middleware:
            if hasattr(middleware, 'process_request'):
                middleware.process_request(prepared)

        log.debug('%s %s', prepared.method, prepared.url)
        response = self.session.send(prepared, timeout=self.config['POTION_REQUEST_TIMEOUT'])

        for middleware in reversed(self.middleware):
            if hasattr(middleware, 'process_response'):
                middleware.process_response(prepared, response)

        log.debug('%s %s -> %s', prepared.method, prepared.url, response.status_code)
        return self.parser(response), response

    def __repr__(self):
        return '<Api {!r}>'.format(self.base_url)
