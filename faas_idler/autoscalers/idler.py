"""
Scale-to-zero reconciler for OpenFaaS functions.
"""
import logging
import time
from datetime import datetime
from enum import Enum
from typing import NamedTuple, Optional

from .classifier import Activity, ScaleDecision, classify, decide, qualified_name, sum_rate

logger = logging.getLogger(__name__)


class FunctionState(Enum):
    SKIPPED = "skipped"
    UNKNOWN = "unknown"
    ACTIVE = "active"
    IDLE_NO_OP = "idle-no-op"
    IDLE_SCALED = "idle-scaled"
    SCALE_FAILED = "scale-failed"


class FunctionOutcome(NamedTuple):
    name: str
    namespace: str
    state: FunctionState
    rate: Optional[float] = None


_ACTIVITY_STATES = {
    Activity.SKIPPED: FunctionState.SKIPPED,
    Activity.UNKNOWN: FunctionState.UNKNOWN,
    Activity.ACTIVE: FunctionState.ACTIVE,
}


class IdleScaler:
    def __init__(self, config, gateway, prometheus):
        self.config = config
        self.gateway = gateway
        self.prometheus = prometheus

    def build_metrics_map(self, functions, namespace=""):
        """Summed invocation rate per qualified function name, None where unknown."""
        window = self.config.inactivity_window
        metrics = {}

        for fn in functions:
            function_name = qualified_name(fn.name, namespace)
            samples = self.prometheus.fetch_rate(function_name, window)
            metrics[function_name] = sum_rate(samples, function_name, fn.invocation_count)

        return metrics

    def reconcile_namespace(self, namespace="", handled=None):
        """Reconcile one namespace. ``handled`` holds (name, namespace) pairs already
        scaled or held back earlier in the same pass."""
        if handled is None:
            handled = set()

        functions = self.gateway.list_functions(namespace)
        if functions is None:
            logger.warning(f"Skipping namespace {namespace or '(default)'} this pass")
            return []

        metrics = self.build_metrics_map(functions, namespace)
        outcomes = []

        for fn in functions:
            function_name = qualified_name(fn.name, namespace)
            rate = metrics.get(function_name)
            activity = classify(fn.labels, rate)

            if activity is Activity.SKIPPED:
                logger.debug(f"Skip: {function_name} due to missing label")
            elif activity is Activity.UNKNOWN:
                logger.debug(f"{function_name}\tno data, deferring")
            elif activity is Activity.ACTIVE:
                logger.debug(f"{function_name}\tactive: {rate:f}")

            key = (fn.name, fn.namespace or namespace)
            if activity is Activity.IDLE and key in handled:
                logger.debug(f"{function_name}\tidle, already handled this pass")
                state = FunctionState.IDLE_NO_OP
            elif activity is Activity.IDLE:
                logger.info(f"{function_name}\tidle")
                state = self.scale_idle(fn.name, namespace)
                if state in (FunctionState.IDLE_SCALED, FunctionState.IDLE_NO_OP):
                    handled.add(key)
            else:
                state = _ACTIVITY_STATES[activity]

            outcomes.append(FunctionOutcome(fn.name, namespace, state, rate))

        return outcomes

    def scale_idle(self, name, namespace=""):
        """Scale an idle function to zero if it still has replicas available."""
        status = self.gateway.get_function_status(name, namespace)
        if status is None:
            logger.warning(f"Unable to confirm replicas for {qualified_name(name, namespace)}")
            return FunctionState.UNKNOWN

        if decide(Activity.IDLE, status.available_replicas) is ScaleDecision.NO_OP:
            return FunctionState.IDLE_NO_OP

        if self.config.scaling_suppressed:
            mode = "dry-run" if self.config.dry_run else "read-only"
            logger.info(f"{mode}: Scaling {name} to 0 replicas")
            return FunctionState.IDLE_NO_OP

        if self.gateway.scale_function(name, namespace, 0):
            return FunctionState.IDLE_SCALED
        return FunctionState.SCALE_FAILED

    def reconcile(self):
        """One full pass: the default namespace, then every listed namespace."""
        handled = set()
        outcomes = self.reconcile_namespace("", handled)

        namespaces = self.gateway.list_namespaces()
        if namespaces is None:
            logger.warning("Unable to list namespaces, only the default namespace was reconciled")
            return outcomes

        seen = {""}
        for namespace in namespaces:
            if namespace in seen:
                continue
            seen.add(namespace)
            outcomes.extend(self.reconcile_namespace(namespace, handled))

        return outcomes

    def run(self, interval=None, passes=None, sleep=time.sleep):
        """Main loop"""
        if interval is None:
            interval = self.config.reconcile_interval.total_seconds()

        logger.info(f"IDLER STARTED (interval {interval:.0f}s, window {self.config.inactivity_window})")

        iteration = 0
        try:
            while passes is None or iteration < passes:
                iteration += 1
                logger.debug(f"[Iteration {iteration}] {datetime.now().strftime('%H:%M:%S')}")

                try:
                    outcomes = self.reconcile()
                    scaled = sum(1 for o in outcomes if o.state is FunctionState.IDLE_SCALED)
                    logger.debug(f"Pass {iteration}: {len(outcomes)} functions, {scaled} scaled to zero")
                except Exception as e:
                    logger.exception(f"Reconciliation pass failed: {e}")

                if passes is None or iteration < passes:
                    sleep(interval)
        except KeyboardInterrupt:
            logger.info("Idler stopped by user")

        return iteration
