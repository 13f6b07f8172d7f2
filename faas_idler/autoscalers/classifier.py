"""
Idle classification for scale-to-zero.

A function is managed only when it opts in through ``SCALE_LABEL``. Among
managed functions, a summed invocation rate of exactly zero over the
inactivity window means idle; anything above zero means active. A missing
rate (failed query, or no series for a function that has been invoked) is
not a verdict and defers the decision to the next pass.
"""

from enum import Enum

SCALE_LABEL = "com.openfaas.scale.zero"


class Activity(Enum):
    SKIPPED = "skipped"    # not opted in
    UNKNOWN = "unknown"    # no usable rate this pass
    ACTIVE = "active"
    IDLE = "idle"


class ScaleDecision(Enum):
    NO_OP = "no-op"
    SCALE_TO_ZERO = "scale-to-zero"


def qualified_name(name, namespace=""):
    """Name used by the gateway metrics, e.g. ``figlet.openfaas-fn``."""
    if namespace:
        return f"{name}.{namespace}"
    return name


def is_eligible(labels):
    if not labels:
        return False
    return labels.get(SCALE_LABEL) in ("1", "true")


def sum_rate(samples, function_name, invocation_count):
    """Metrics-map value for one function, None when there is nothing to go on."""
    if samples is None:
        return None
    if not samples and invocation_count != 0:
        return None
    return sum((s.value for s in samples if s.function_name == function_name), 0.0)


def classify(labels, rate):
    if not is_eligible(labels):
        return Activity.SKIPPED
    if rate is None:
        return Activity.UNKNOWN
    if rate == 0:
        return Activity.IDLE
    return Activity.ACTIVE


def decide(activity, available_replicas):
    if activity is Activity.IDLE and available_replicas > 0:
        return ScaleDecision.SCALE_TO_ZERO
    return ScaleDecision.NO_OP
