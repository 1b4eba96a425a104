from urllib.parse import urlsplit
import unittest

from flask import Flask, json
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from potion_client import Api

BASE_URL = 'http://api.example.com'


class FlaskAdapter(BaseAdapter):
    """
    A transport adapter sending requests to the test client of a Flask application. Sent requests are recorded in
    :attr:`requests`.
    """

    def __init__(self, app):
        super(FlaskAdapter, self).__init__()
        self.app = app
        self.requests = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.requests.append(request)
        url = urlsplit(request.url)

        headers = {k: v for k, v in request.headers.items() if k.lower() != 'content-length'}
        response = self.app.test_client().open(url.path,
                                               method=request.method,
                                               query_string=url.query,
                                               headers=headers,
                                               data=request.body)

        result = requests.Response()
        result.status_code = response.status_code
        result.reason = response.status
        result.headers = CaseInsensitiveDict(response.headers)
        result._content = response.get_data()
        result.encoding = 'utf-8'
        result.url = request.url
        result.request = request
        return result

    def close(self):
        pass


class BaseTestCase(unittest.TestCase):

    def create_app(self):
        app = Flask(__name__)
        app.testing = True
        return app

    def create_api(self, **kwargs):
        session = requests.Session()
        session.mount(BASE_URL, self.adapter)
        return Api(BASE_URL, session=session, **kwargs)

    def setUp(self):
        self.app = self.create_app()
        self.adapter = FlaskAdapter(self.app)
        self.api = self.create_api()

    @property
    def requests(self):
        return self.adapter.requests

    @property
    def last_request(self):
        return self.adapter.requests[-1]

    def request_path(self, request):
        url = urlsplit(request.url)
        if url.query:
            return '{}?{}'.format(url.path, url.query)
        return url.path

    def request_json(self, request):
        return json.loads(request.body)

    def assertRequests(self, expected):
        self.assertEqual(expected, ['{} {}'.format(r.method, self.request_path(r)) for r in self.requests])
