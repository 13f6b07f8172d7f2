"""
Prometheus query client for gateway invocation rates.
"""

import logging
from typing import Any, List, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

INVOCATION_METRIC = "gateway_function_invocation_total"


class MetricLabels(BaseModel):
    code: str = ""
    function_name: str = ""


class QueryResult(BaseModel):
    metric: MetricLabels
    value: List[Any] = Field(min_length=2, max_length=2)


class QueryData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    result_type: str = Field("", alias="resultType")
    result: List[QueryResult] = []


class QueryResponse(BaseModel):
    status: str
    data: Optional[QueryData] = None
    error: Optional[str] = None


class RateSample(BaseModel):
    code: str
    function_name: str
    value: float


def build_rate_query(function_name, window):
    """Per-status-code invocation rate of one function over ``window``."""
    return (
        f'sum(rate({INVOCATION_METRIC}{{function_name="{function_name}", code=~".*"}}[{window}]))'
        f' by (code, function_name)'
    )


class PrometheusClient:
    def __init__(self, config, session=None):
        self.base_url = config.prometheus_url
        self.timeout = config.http_timeout.total_seconds()
        self.session = session or requests.Session()

    def fetch(self, query):
        """Run an instant query, returning the decoded response or None."""
        try:
            res = self.session.get(f"{self.base_url}/api/v1/query",
                                   params={"query": query}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Prometheus query failed: {e}")
            return None

        if not res.ok:
            logger.error(f"Prometheus query failed: HTTP {res.status_code} {res.text.strip()}")
            return None

        try:
            body = QueryResponse.model_validate(res.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unable to decode Prometheus response: {e}")
            return None

        if body.status != "success" or body.data is None:
            logger.error(f"Prometheus query failed: {body.error or body.status}")
            return None
        return body

    def fetch_rate(self, function_name, window):
        body = self.fetch(build_rate_query(function_name, window))
        if body is None:
            return None

        samples = []
        for series in body.data.result:
            logger.debug(f"{series.metric.function_name} code={series.metric.code} value={series.value}")
            try:
                value = float(series.value[1])
            except (TypeError, ValueError) as e:
                if series.metric.function_name == function_name:
                    logger.error(f"Unable to convert value for {function_name}: {e}")
                    return None
                logger.warning(f"Unable to convert value for metric: {e}")
                continue
            samples.append(RateSample(code=series.metric.code,
                                      function_name=series.metric.function_name,
                                      value=value))
        return samples
