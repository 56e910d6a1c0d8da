"""Error taxonomy for recognition and editing."""


class RecognitionError(Exception):
    """Base class for failures of a recognition request.

    ``kind`` is a stable identifier for logging and client branching; the
    exception message is safe to show to the user.
    """

    kind = "recognition"
    default_message = "识别失败，请重试"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidInputError(RecognitionError):
    """The image reference is missing or is not a data URI / HTTP(S) URL."""

    kind = "invalid_input"
    default_message = "图片格式不正确"


class ConfigurationError(RecognitionError):
    """The vision API credential is not configured."""

    kind = "configuration"
    default_message = "API密钥未配置"


class UpstreamServiceError(RecognitionError):
    """The vision endpoint answered with a non-success status."""

    kind = "upstream"
    default_message = "AI识别服务暂时不可用"

    def __init__(
        self, message: str | None = None, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class EmptyResponseError(RecognitionError):
    """The model call succeeded but returned no content."""

    kind = "empty_response"
    default_message = "AI返回结果为空，请检查API密钥或稍后重试"


class TruncatedResponseError(RecognitionError):
    """The model output looks cut off before the JSON closed."""

    kind = "truncated"
    default_message = "AI响应被截断，请减少食物种类后重试"


class MalformedResponseError(RecognitionError):
    """The model output could not be parsed as a JSON object."""

    kind = "malformed"
    default_message = "AI返回格式错误，请重试"


class RecognitionDeclinedError(RecognitionError):
    """The model reported that it could not identify any food."""

    kind = "declined"
    default_message = "无法识别，请重新拍照"

    def __init__(
        self, message: str | None = None, suggestion: str | None = None
    ) -> None:
        super().__init__(message)
        self.suggestion = suggestion


class ScalingGuardError(ValueError):
    """Portion scaling was asked to divide by a zero or invalid weight."""


class EntryEditError(ValueError):
    """An edit targeted an unknown entry or field, or a negative value."""
