from .gateway import FunctionStatus, GatewayClient
from .prometheus import PrometheusClient, RateSample

__all__ = ["FunctionStatus", "GatewayClient", "PrometheusClient", "RateSample"]
