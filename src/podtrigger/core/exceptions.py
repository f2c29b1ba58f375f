class PodTriggerError(Exception):
    """Base exception for podtrigger."""

    pass


class ConfigError(PodTriggerError):
    """Raised when trigger metadata is missing, malformed or contradictory."""

    pass


class NotFoundError(PodTriggerError):
    """Raised when a referenced scalable object or workload does not exist."""

    pass


class UnsupportedWorkloadError(PodTriggerError):
    """Raised when the scale target is neither a Deployment nor a StatefulSet."""

    pass


class ListingError(PodTriggerError):
    """Raised when the cluster or metrics API cannot be reached."""

    pass


class UnsupportedMetricError(PodTriggerError):
    """Raised when the metric name is not a recognized resource."""

    pass


class NoActivePodsError(PodTriggerError):
    """Raised when no pod qualifies for aggregation."""

    pass
