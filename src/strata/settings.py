"""
Settings for strata itself, loaded with pydantic-settings.

These only tune library defaults; they are never merged into the
configuration trees the library manages. All fields can be set through
environment variables with the STRATA_ prefix:

  STRATA_FAILURE_POLICY=skip_unavailable
  STRATA_LOG_LEVEL=debug
  STRATA_ENV_DELIMITER=__
"""

import functools as _functools
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import strata.constants as constants

FailurePolicyName = _typing.Literal["strict", "skip_unavailable"]
LogLevelName = _typing.Literal["debug", "info", "warning", "error"]


class Settings(_pydantic_settings.BaseSettings):
    """
    Library-wide defaults.

    Constructor arguments override environment variables, which override
    the field defaults.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix=constants.ENV_PREFIX,
        extra="ignore",
    )

    failure_policy: FailurePolicyName = _pydantic.Field(
        default="strict",
        description="What merge() does when a source is unavailable",
    )

    log_level: LogLevelName = _pydantic.Field(
        default="warning",
        description="Log level used by the strata CLI",
    )

    env_delimiter: str = _pydantic.Field(
        default=constants.DEFAULT_ENV_DELIMITER,
        min_length=1,
        description="Nested-key separator for environment sources built by the CLI",
    )

    @_pydantic.field_validator("failure_policy", "log_level", mode="before")
    @classmethod
    def _normalize_choice(cls, v: _typing.Any) -> _typing.Any:
        """Accept any case, and dashes in place of underscores."""
        if isinstance(v, str):
            return v.strip().lower().replace("-", "_")
        return v


@_functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide Settings, loading them on first use."""
    return Settings()


def reset_settings() -> None:
    """Forget the cached Settings so the next call re-reads the environment."""
    get_settings.cache_clear()
