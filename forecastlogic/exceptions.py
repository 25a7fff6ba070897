class ForecastLogicError(Exception): ...


class PipelineInputError(ForecastLogicError): ...


class ContextError(ForecastLogicError): ...


class TimestampError(ForecastLogicError): ...


def require(
    condition: bool, message: str, exc: type[ForecastLogicError] = ForecastLogicError
):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
