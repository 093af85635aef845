"""Queue configuration for eventspool."""

from enum import Enum

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Connection fields required by every persistent backend, in check order
REQUIRED_CONNECTION_FIELDS = ("host", "port", "path")

DEFAULT_ENV_PREFIX = "EVENTSPOOL_"


class BackendKind(str, Enum):
    """Backend kinds shipped with eventspool.

    Any other string is accepted as long as an adapter is registered for it.
    """

    MEMORY = "in-memory"
    LOCAL = "local"
    REDIS = "redis"


# Spellings accepted for the non-persistent kind
MEMORY_KIND_ALIASES = frozenset({BackendKind.MEMORY.value, "memory"})


def is_memory_kind(kind: str) -> bool:
    return kind in MEMORY_KIND_ALIASES


class QueueConfig(BaseModel):
    """Immutable queue configuration.

    Attributes:
        backend_kind: "in-memory" (alias "memory") for no persistence,
            otherwise the name of a registered storage adapter.
        host: Storage host. Required unless backend_kind is "in-memory".
        port: Storage port. Required unless backend_kind is "in-memory".
        path: Storage path or namespace. Required unless backend_kind is "in-memory".
        events: Event-name tags this queue instance is scoped to.
    """

    backend_kind: str = BackendKind.MEMORY.value
    host: str | None = None
    port: int | None = None
    path: str | None = None
    events: tuple[str, ...] = ()

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }

    @field_validator("backend_kind", mode="before")
    @classmethod
    def validate_backend_kind(cls, v: object) -> object:
        if isinstance(v, BackendKind):
            return v.value
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("backend_kind must not be empty")
            if is_memory_kind(v):
                return BackendKind.MEMORY.value
        return v

    @field_validator("host", "path", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("events", mode="before")
    @classmethod
    def normalize_events(cls, v: object) -> object:
        """Accept a single event name as well as a sequence of names."""
        if v is None:
            return ()
        if isinstance(v, str):
            return (v,)
        return v

    @property
    def is_memory(self) -> bool:
        return self.backend_kind == BackendKind.MEMORY.value

    def missing_fields(self) -> list[str]:
        """Return required connection fields that are unset, in check order."""
        if self.is_memory:
            return []
        return [name for name in REQUIRED_CONNECTION_FIELDS if getattr(self, name) is None]

    @classmethod
    def from_env(cls, prefix: str = DEFAULT_ENV_PREFIX) -> "QueueConfig":
        """Build a config from ``{prefix}*`` environment variables."""
        return QueueSettings(_env_prefix=prefix).to_config()


class QueueSettings(BaseSettings):
    """Environment-backed queue settings.

    Reads ``EVENTSPOOL_BACKEND_KIND``, ``EVENTSPOOL_HOST``, ``EVENTSPOOL_PORT``,
    ``EVENTSPOOL_PATH`` and ``EVENTSPOOL_EVENTS`` (comma separated) by default.
    """

    backend_kind: str = BackendKind.MEMORY.value
    host: str | None = None
    port: int | None = None
    path: str | None = None
    events: str | None = None

    model_config = SettingsConfigDict(
        env_prefix=DEFAULT_ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
    )

    def event_names(self) -> tuple[str, ...]:
        if not self.events:
            return ()
        return tuple(name.strip() for name in self.events.split(",") if name.strip())

    def to_config(self) -> QueueConfig:
        return QueueConfig(
            backend_kind=self.backend_kind,
            host=self.host,
            port=self.port,
            path=self.path,
            events=self.event_names(),
        )
