"""Common types and enums shared across schemas."""

from enum import Enum


class _ParseableEnum(str, Enum):
    """String enum that parses member values case-insensitively."""

    @classmethod
    def parse(cls, value: "str | _ParseableEnum"):
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for member in cls:
            if member.value.lower() == text.lower():
                return member
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Invalid {cls.__name__} '{value}'. Valid values: {valid}")


class Language(_ParseableEnum):
    """Language variant an algorithm can be executed in."""

    CSHARP = "CSharp"
    FSHARP = "FSharp"
    VISUAL_BASIC = "VisualBasic"
    JAVA = "Java"
    PYTHON = "Python"


class AlgorithmStatus(_ParseableEnum):
    """Final status reported by the engine for a run."""

    DEPLOY_ERROR = "DeployError"
    IN_QUEUE = "InQueue"
    RUNNING = "Running"
    STOPPED = "Stopped"
    LIQUIDATED = "Liquidated"
    DELETED = "Deleted"
    COMPLETED = "Completed"
    RUNTIME_ERROR = "RuntimeError"
    INVALID = "Invalid"
    LOGGING_IN = "LoggingIn"
    INITIALIZING = "Initializing"
    HISTORY = "History"


# Sentinel marking a count expectation as non-deterministic
UNCHECKED = -1

DEFAULT_LANGUAGES = (Language.CSHARP, Language.PYTHON)
