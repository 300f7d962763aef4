from datetime import datetime
from functools import wraps

PARSER_FORMATS = ("auto", "iso8601", "simple")
TIMEZONES = ("UTC", "local")

DEFAULT_SETTINGS = {
    "PARSER_FORMAT": "auto",
    "TIMEZONE": "UTC",
    "RELATIVE_BASE": None,
}


class SettingValidationError(ValueError):
    pass


class Settings:
    """Control the behaviour of :func:`spanparser.parse` and friends.

    Keys are upper case, unknown keys are rejected::

        Settings({"PARSER_FORMAT": "iso8601", "TIMEZONE": "local"})

    * ``PARSER_FORMAT``: ``"auto"`` sniffs the leading ``P``; ``"iso8601"``
      and ``"simple"`` force one grammar.
    * ``TIMEZONE``: ``"UTC"`` or ``"local"``, the view used when instants are
      presented by the command line tool.
    * ``RELATIVE_BASE``: default reference instant for
      :func:`spanparser.elapsed`. ``None`` means the current clock.
    """

    def __init__(self, settings=None):
        values = dict(DEFAULT_SETTINGS)
        if settings:
            values.update(settings)
        check_settings(values)
        for key, value in values.items():
            setattr(self, key, value)

    def replace(self, **kwargs):
        values = {key: getattr(self, key) for key in DEFAULT_SETTINGS}
        values.update(kwargs)
        return Settings(values)

    def __repr__(self):
        values = ", ".join(f"{key}={getattr(self, key)!r}" for key in DEFAULT_SETTINGS)
        return f"Settings({values})"


def check_settings(settings):
    unknown = set(settings) - set(DEFAULT_SETTINGS)
    if unknown:
        raise SettingValidationError(
            "{} are not valid settings".format(", ".join(sorted(unknown)))
        )

    if settings["PARSER_FORMAT"] not in PARSER_FORMATS:
        raise SettingValidationError(
            '"PARSER_FORMAT" must be one of {}, got {!r}'.format(
                ", ".join(PARSER_FORMATS), settings["PARSER_FORMAT"]
            )
        )

    if settings["TIMEZONE"] not in TIMEZONES:
        raise SettingValidationError(
            '"TIMEZONE" must be "UTC" or "local", got {!r}'.format(settings["TIMEZONE"])
        )

    base = settings["RELATIVE_BASE"]
    if base is not None and not isinstance(base, datetime):
        raise SettingValidationError(
            '"RELATIVE_BASE" must be a datetime, got {}'.format(type(base).__name__)
        )


settings = Settings()


def apply_settings(f):
    """Replace the ``settings`` keyword argument (a dict or None) with a Settings instance."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        user_settings = kwargs.get("settings")
        if user_settings is None:
            kwargs["settings"] = settings
        elif isinstance(user_settings, Settings):
            pass
        elif isinstance(user_settings, dict):
            kwargs["settings"] = Settings(user_settings)
        else:
            raise TypeError(
                "settings can only be either dict or instance of Settings class"
            )
        return f(*args, **kwargs)

    return wrapper
