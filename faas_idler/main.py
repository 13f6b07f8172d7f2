"""
faas-idler: scale idle OpenFaaS functions to zero.

Functions opt in with the label ``com.openfaas.scale.zero=true``. Every
reconcile interval the idler asks Prometheus for each function's invocation
rate over the inactivity window and scales the idle ones to zero replicas
through the gateway.
"""
import argparse
import logging

from .autoscalers.idler import IdleScaler
from .clients.gateway import GatewayClient
from .clients.prometheus import PrometheusClient
from .config.config import ConfigError, read_config
from .config.credentials import read_credentials

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def build_parser():
    parser = argparse.ArgumentParser(
        prog="faas-idler",
        description="Scale idle OpenFaaS functions to zero",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Configuration is read from the environment: gateway_url, prometheus_host,\n"
               "prometheus_port, inactivity_duration, reconcile_interval, http_timeout,\n"
               "read_only, write_debug, secret_mount_path",
    )
    parser.add_argument("--dry-run", action="store_true",
                        help="Log scaling events instead of sending them")
    parser.add_argument("--read-only", action="store_true", default=None,
                        help="Same as --dry-run (overrides read_only)")
    parser.add_argument("--debug", action="store_true", default=None,
                        help="Verbose logging (overrides write_debug)")
    parser.add_argument("--secret-mount-path",
                        help="Directory holding basic-auth-user and basic-auth-password")
    parser.add_argument("--once", action="store_true",
                        help="Run a single reconciliation pass and exit")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        config = read_config(dry_run=args.dry_run, read_only=args.read_only,
                             debug=args.debug, secret_mount_path=args.secret_mount_path)
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error(f"Invalid configuration: {e}")
        return 1

    logging.basicConfig(level=logging.DEBUG if config.write_debug else logging.INFO,
                        format=LOG_FORMAT)

    if not config.gateway_url:
        logger.error("gateway_url (faas-netes/faas-swarm) is required.")
        return 1

    credentials = read_credentials(config.secret_mount_path)
    gateway = GatewayClient(config, credentials)
    prometheus = PrometheusClient(config)

    info = gateway.get_info()
    if info is None:
        logger.error(f"Unable to reach gateway at {config.gateway_url}")
        return 1

    logger.info(f"Gateway version: {info.version.release}, SHA: {info.version.sha}")
    logger.info(f"   dry_run: {config.dry_run}")
    logger.info(f"   read_only: {config.read_only}")
    logger.info(f"   gateway_url: {config.gateway_url}")
    logger.info(f"   inactivity_duration: {config.inactivity_duration}")
    logger.info(f"   reconcile_interval: {config.reconcile_interval}")

    idler = IdleScaler(config, gateway, prometheus)
    idler.run(passes=1 if args.once else None)
    return 0
