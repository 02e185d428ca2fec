from typing import Union

from fastapi import Request

from shopboard.app.core.settings import Settings, get_settings
from shopboard.app.services.marketplace import MockDataSource, LiveDataSource

DataSource = Union[MockDataSource, LiveDataSource]


# Data source chosen at startup (see main.py); tests override this dependency
def get_data_source(request: Request) -> DataSource:
    return request.app.state.data_source


def get_app_settings() -> Settings:
    return get_settings()
