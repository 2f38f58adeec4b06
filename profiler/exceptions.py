from typing import Any, Dict, Optional


class ProfilerError(Exception):
    """
    Base exception for the profiler.

    Carries a context dict that is rendered next to the message.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        base_msg = self.message
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" [Context: {context_str}]"
        return base_msg


class ConfigError(ProfilerError):
    """
    Invalid profiler configuration (bad env value, unknown level name).
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 field_value: Optional[Any] = None, **kwargs):
        context = kwargs.pop('context', {})
        if field_name:
            context['field'] = field_name
        if field_value is not None:
            context['value'] = str(field_value)[:100]
        super().__init__(message, context=context, **kwargs)


class MeasurementError(ProfilerError):
    """
    A variable could not be copied for size measurement.
    """

    def __init__(self, message: str, label: Optional[str] = None,
                 type_name: Optional[str] = None, **kwargs):
        context = kwargs.pop('context', {})
        if label:
            context['label'] = label
        if type_name:
            context['type'] = type_name
        super().__init__(message, context=context, **kwargs)


__all__ = ["ProfilerError", "ConfigError", "MeasurementError"]
