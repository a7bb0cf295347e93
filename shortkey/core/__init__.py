from shortkey.core.keys import KeyAssigner
from shortkey.core.links import LinkService
from shortkey.core.liveness import Health, HealthTransition, LivenessMonitor


__all__ = [
    'KeyAssigner',
    'LinkService',
    'Health',
    'HealthTransition',
    'LivenessMonitor',
]
