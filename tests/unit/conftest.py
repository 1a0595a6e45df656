import io

import pytest

from restvalve.client import AbstractClientHttpRequest, ClientHttpRequestFactory, ClientHttpResponse
from restvalve.structures import HttpHeaders


class StubResponse(ClientHttpResponse):
    def __init__(self, status_code, status_text="", headers=None, body=b""):
        super().__init__()
        self._status_code = status_code
        self._status_text = status_text
        self._headers = HttpHeaders(headers or {}, read_only=True)
        self._payload = body
        self.release_count = 0

    @property
    def raw_status_code(self):
        return self._status_code

    @property
    def status_text(self):
        return self._status_text

    @property
    def headers(self):
        return self._headers

    def _open_body(self):
        return io.BytesIO(self._payload)

    def _release(self):
        self.release_count += 1


class StubRequest(AbstractClientHttpRequest):
    def __init__(self, uri, method, response, calls):
        super().__init__(uri, method)
        self.response = response
        self.calls = calls

    def _execute_internal(self, headers, body):
        self.calls.append({"method": self.method, "uri": self.uri, "headers": headers.multi_items(), "body": body})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class StubRequestFactory(ClientHttpRequestFactory):
    def __init__(self, response):
        self.response = response
        self.calls = []

    def create_request(self, uri, method):
        return StubRequest(uri, method, self.response, self.calls)


@pytest.fixture
def response_factory():
    def _factory(status_code, text="", headers=None, body=b""):
        return StubResponse(status_code, text, headers, body)

    return _factory


@pytest.fixture
def stub_factory(response_factory):
    def _install(response=None):
        return StubRequestFactory(response if response is not None else response_factory(200, "OK"))

    return _install
