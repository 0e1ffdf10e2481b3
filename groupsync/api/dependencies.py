"""
Dependencies used by the API.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from structlog import get_logger
from structlog.typing import FilteringBoundLogger

from groupsync.config.settings import Settings
from groupsync.service.updater import UpdaterClient


@lru_cache
def SETTINGS():
    return Settings()


def logger():
    return get_logger()


def updater_client(request: Request) -> UpdaterClient:
    return request.app.updater_client


SettingsDependency = Annotated[Settings, Depends(SETTINGS)]
LoggerDependency = Annotated[FilteringBoundLogger, Depends(logger)]
UpdaterDependency = Annotated[UpdaterClient, Depends(updater_client)]
