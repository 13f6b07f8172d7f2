"""
Client for the OpenFaaS gateway REST API (the control plane).

Every call authenticates with basic auth and is bounded by the configured
timeout. Failures are logged and returned as ``None``/``False`` so the caller
can move on to the next namespace or function.
"""

import logging
from typing import Dict, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class FunctionStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    namespace: str = ""
    image: str = ""
    labels: Optional[Dict[str, str]] = None
    annotations: Optional[Dict[str, str]] = None
    replicas: int = 0
    available_replicas: int = Field(0, alias="availableReplicas")
    invocation_count: float = Field(0, alias="invocationCount")


class ScaleServiceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    service_name: str = Field(alias="serviceName")
    replicas: int = Field(ge=0)


class VersionInfo(BaseModel):
    release: str = ""
    sha: str = ""


class ProviderInfo(BaseModel):
    provider: str = ""
    orchestration: str = ""
    version: Optional[VersionInfo] = None


class GatewayInfo(BaseModel):
    version: VersionInfo
    provider: Optional[ProviderInfo] = None


class GatewayClient:
    def __init__(self, config, credentials, session=None):
        self.config = config
        self.timeout = config.http_timeout.total_seconds()
        self.session = session or requests.Session()
        self.session.auth = credentials.as_auth()

    def _request(self, method, path, namespace="", **kwargs):
        params = {"namespace": namespace} if namespace else None
        url = self.config.gateway_endpoint(path)
        try:
            return self.session.request(method, url, params=params,
                                        timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            return None

    def _decode(self, res, schema, what):
        if not res.ok:
            logger.error(f"Unable to get {what}: HTTP {res.status_code}")
            return None
        try:
            return schema.model_validate(res.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unable to decode {what}: {e}")
            return None

    def get_info(self):
        """Gateway version and provider, logged at startup."""
        res = self._request("GET", "system/info")
        if res is None:
            return None
        return self._decode(res, GatewayInfo, "gateway info")

    def list_namespaces(self):
        """Namespaces known to the provider, [] if it has no namespace support."""
        res = self._request("GET", "system/namespaces")
        if res is None:
            return None
        if res.status_code == 404:
            return []
        if not res.ok:
            logger.error(f"Unable to list namespaces: HTTP {res.status_code}")
            return None
        if not res.content.strip():
            return []
        try:
            namespaces = res.json()
        except ValueError as e:
            logger.error(f"Unable to decode namespaces: {e}")
            return None
        if namespaces is None:
            return []
        if not isinstance(namespaces, list) or not all(isinstance(n, str) for n in namespaces):
            logger.error(f"Unable to decode namespaces: unexpected body {namespaces!r}")
            return None
        return namespaces

    def list_functions(self, namespace=""):
        res = self._request("GET", "system/functions", namespace)
        if res is None:
            return None
        if not res.ok:
            logger.error(f"Unable to list functions in {namespace or 'default namespace'}: "
                         f"HTTP {res.status_code}")
            return None
        try:
            body = res.json()
            return [FunctionStatus.model_validate(item) for item in body or []]
        except (ValueError, TypeError, ValidationError) as e:
            logger.error(f"Unable to decode functions in {namespace or 'default namespace'}: {e}")
            return None

    def get_function_status(self, name, namespace=""):
        """Fresh status of one function, used right before a scale decision."""
        res = self._request("GET", f"system/function/{name}", namespace)
        if res is None:
            return None
        return self._decode(res, FunctionStatus, f"status of {name}")

    def scale_function(self, name, namespace="", replicas=0):
        """Ask the gateway to scale a function. Does not wait for convergence."""
        body = ScaleServiceRequest(service_name=name, replicas=replicas)
        res = self._request("POST", f"system/scale-function/{name}", namespace,
                            json=body.model_dump(by_alias=True))
        if res is None:
            return False

        logger.info(f"Scale {name} {res.status_code} {replicas}")
        if not res.ok:
            logger.warning(f"Scale request for {name} rejected: {res.text.strip()}")
            return False
        return True
