"""
Access to the in-memory Hive shared across all routes.

main.create_app() builds one Hive per application and parks it on app.state;
routes receive it through FastAPI dependency injection.
"""

from fastapi.requests import HTTPConnection

from tracking.hive import Hive


def get_hive(connection: HTTPConnection) -> Hive:
    return connection.app.state.hive
