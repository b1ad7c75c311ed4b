"""Handler layer exports."""

from .fanout import TranslationFanout
from .pipeline import PipelineDriver
from .publisher import DeliveryPublisher

__all__ = ["TranslationFanout", "PipelineDriver", "DeliveryPublisher"]
