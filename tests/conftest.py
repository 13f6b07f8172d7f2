# tests/conftest.py
import json
from unittest.mock import MagicMock

import pytest
import requests

from faas_idler.clients.gateway import FunctionStatus, GatewayClient
from faas_idler.clients.prometheus import PrometheusClient, RateSample
from faas_idler.config.config import Config
from faas_idler.config.credentials import Credentials


@pytest.fixture
def make_response():
    """Factory for real requests.Response objects carrying a JSON (or raw) body"""
    def _make(status_code=200, body=None, raw=None):
        res = requests.Response()
        res.status_code = status_code
        if raw is not None:
            res._content = raw.encode()
        elif body is not None:
            res._content = json.dumps(body).encode()
        else:
            res._content = b""
        res.encoding = "utf-8"
        return res
    return _make


@pytest.fixture
def make_function():
    def _make(name, labels=None, available_replicas=1, invocation_count=10, namespace=""):
        return FunctionStatus(name=name, namespace=namespace, labels=labels,
                              available_replicas=available_replicas,
                              invocation_count=invocation_count)
    return _make


@pytest.fixture
def sample():
    def _make(function_name, value, code="200"):
        return RateSample(code=code, function_name=function_name, value=value)
    return _make


@pytest.fixture
def config():
    return Config(gateway_url="http://gateway:8080/")


@pytest.fixture
def credentials():
    return Credentials(username="admin", password="secret")


@pytest.fixture
def session():
    """Mock requests.Session"""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def gateway_client(config, credentials, session):
    return GatewayClient(config, credentials, session=session)


@pytest.fixture
def prometheus_client(config, session):
    return PrometheusClient(config, session=session)


@pytest.fixture
def gateway():
    """Mock gateway client with no namespaces and no functions"""
    gw = MagicMock(spec=GatewayClient)
    gw.list_namespaces.return_value = []
    gw.list_functions.return_value = []
    gw.get_function_status.return_value = None
    gw.scale_function.return_value = True
    return gw


@pytest.fixture
def prometheus():
    prom = MagicMock(spec=PrometheusClient)
    prom.fetch_rate.return_value = []
    return prom
