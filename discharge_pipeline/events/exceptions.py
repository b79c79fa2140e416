from discharge_pipeline.processor.exceptions import PipelineError


class EventDecodeError(PipelineError):
    """Raised when a payload matches no known event shape. Never retried."""
