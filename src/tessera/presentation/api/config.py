"""Settings as seen by the HTTP layer.

Request dependencies resolve settings through ``get_api_settings`` so
that ``create_app(settings=...)`` can swap them per application. It keeps
no cache of its own: ``clear_settings_cache()`` takes effect on the next
request.
"""

from tessera_config.settings import Settings, get_settings


def get_api_settings() -> Settings:
    return get_settings()
