from enum import StrEnum
from functools import lru_cache

from catalog_admin.core.settings.base import Settings as BaseSettings
from catalog_admin.core.settings.local import Settings as LocalSettings
from catalog_admin.core.settings.production import Settings as ProductionSettings
from catalog_admin.core.settings.staging import Settings as StagingSettings


class Environment(StrEnum):
    LOCAL = "local"
    STAGING = "staging"
    PRODUCTION = "production"


SETTINGS_BY_ENVIRONMENT: dict[Environment, type[BaseSettings]] = {
    Environment.LOCAL: LocalSettings,
    Environment.STAGING: StagingSettings,
    Environment.PRODUCTION: ProductionSettings,
}


@lru_cache
def get_settings() -> BaseSettings:
    """
    Load the settings class matching the ``ENVIRONMENT`` variable.

    Raises:
        ValueError: If ``ENVIRONMENT`` names an unknown environment
    """
    environment = Environment(BaseSettings().ENVIRONMENT.lower())
    return SETTINGS_BY_ENVIRONMENT[environment]()


settings = get_settings()
