import logging

from flask import json
from jsonschema import Draft4Validator
from werkzeug.http import http_date

from .exceptions import ParseError
from .utils import is_blank

log = logging.getLogger(__name__)


def empty_envelope():
    return {'data': {}, 'errors': [], 'metadata': {}}


class ParseJSON(object):
    """
    Base class for response parsers. A parser turns a :class:`requests.Response` into an envelope of the form
    ``{"data": ..., "errors": ..., "metadata": ...}`` where ``errors`` and ``metadata`` are never ``None``.

    Responses with a status code in :attr:`empty_status_codes` produce an empty envelope without being parsed.
    """
    empty_status_codes = (204, 304)

    _container_validator = Draft4Validator({"type": ["object", "array"]})

    def parse_json(self, body=None):
        """
        Decodes a response body.

        :param str body: response body; a blank body decodes to an empty object
        :raises ParseError: if the body is not JSON or does not decode to an object or an array
        """
        if is_blank(body):
            body = '{}'
        message = 'Response from the API must behave like a Hash or an Array ' \
                  '(last JSON response was {!r})'.format(body)

        try:
            data = json.loads(body)
        except ValueError:
            raise ParseError(message)

        if not self._container_validator.is_valid(data):
            raise ParseError(message)
        return data

    def parse(self, body):
        raise NotImplementedError()

    def __call__(self, response):
        if response.status_code in self.empty_status_codes:
            return empty_envelope()
        return self.parse(response.text)


class FirstLevelParseJSON(ParseJSON):
    """
    Uses the whole response body as data. The ``errors`` and ``metadata`` keys of an object body are removed from
    the data and returned separately.
    """

    def parse(self, body):
        data = self.parse_json(body)
        errors, metadata = {}, {}
        if isinstance(data, dict):
            errors = data.pop('errors', None) or {}
            metadata = data.pop('metadata', None) or {}
        return {
            'data': data,
            'errors': errors,
            'metadata': metadata
        }


class DefaultParseJSON(FirstLevelParseJSON):
    pass


class SecondLevelParseJSON(ParseJSON):
    """
    Reads data, errors and metadata from the ``data``, ``errors`` and ``metadata`` keys of the response body.
    """

    def parse(self, body):
        json_ = self.parse_json(body)
        if not isinstance(json_, dict):
            return {'data': json_, 'errors': {}, 'metadata': {}}

        data = json_.get('data')
        return {
            'data': data if data is not None else {},
            'errors': json_.get('errors') or {},
            'metadata': json_.get('metadata') or {}
        }


class JsonApiParser(ParseJSON):
    """
    Parses JSON API compound documents.

    The ``relationships`` of every primary resource are resolved against the ``included`` resources by
    ``(type, id)`` and merged into the resource's ``attributes``, so that they are parsed like nested associations.
    """

    def parse(self, body):
        json_ = self.parse_json(body)
        if not isinstance(json_, dict):
            raise ParseError('JSON API documents must be objects (last JSON response was {!r})'.format(body))

        included = json_.get('included') or []
        primary_data = json_.get('data')

        resources = primary_data if isinstance(primary_data, list) else [primary_data]
        for resource in resources:
            if not isinstance(resource, dict):
                continue
            relationships = resource.pop('relationships', None) or {}
            resource.setdefault('attributes', {}).update(self.populate_relationships(relationships, included))

        return {
            'data': primary_data if primary_data is not None else {},
            'errors': json_.get('errors') or [],
            'metadata': json_.get('meta') or {}
        }

    @staticmethod
    def _identifier(resource):
        return resource.get('type'), resource.get('id')

    def populate_relationships(self, relationships, included):
        if not included:
            return {}

        pool = {self._identifier(item): item for item in included}
        built = {}
        for name, linkage in relationships.items():
            linkage_data = (linkage or {}).get('data')
            if isinstance(linkage_data, list):
                built[name] = [pool[self._identifier(l)] for l in linkage_data if self._identifier(l) in pool]
            elif linkage_data:
                built[name] = pool.get(self._identifier(linkage_data))
            else:
                built[name] = None
        return built


class AcceptJSON(object):
    """
    Asks the API for JSON responses.
    """

    def process_request(self, request):
        request.headers['Accept'] = 'application/json'


class CacheUnmodified(object):
    """
    Revalidates ``GET`` and ``HEAD`` responses with ``If-Modified-Since``. A ``304 Not Modified`` response is
    rewritten into a ``200 OK`` response with the cached body.

    :param cache: a mapping-like object supporting ``get()`` and item assignment, such as a :class:`dict`
    :param str cache_key_prefix: optional prefix for the cache keys
    """
    cached_methods = ('GET', 'HEAD')

    def __init__(self, cache=None, cache_key_prefix=None):
        self.cache = cache if cache is not None else {}
        self.cache_key_prefix = cache_key_prefix

    def _cache_key(self, kind, url):
        return '/'.join(part for part in (self.cache_key_prefix, kind, url) if part is not None)

    def process_request(self, request):
        if request.method not in self.cached_methods:
            return
        cached_time = self.cache.get(self._cache_key('time', request.url))
        if cached_time and 'If-Modified-Since' not in request.headers:
            request.headers['If-Modified-Since'] = cached_time

    def process_response(self, request, response):
        if request.method not in self.cached_methods:
            return

        if response.status_code == 304:
            cached_body = self.cache.get(self._cache_key('body', request.url))
            if cached_body is not None:
                log.debug('Using cached response body for %s', request.url)
                response._content = cached_body
                response.status_code = 200
        elif response.status_code == 200:
            self.cache[self._cache_key('body', request.url)] = response.content
            self.cache[self._cache_key('time', request.url)] = http_date()
