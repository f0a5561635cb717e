from flask import current_app
from flask_jwt_extended import get_current_user

from health_records.access import actor_for
from health_records.errors import Unauthorized


def current_actor():
    """The authenticated caller as an ``Actor``; only valid under ``jwt_required``."""
    user = get_current_user()
    if user is None:
        raise Unauthorized()
    return actor_for(user)


def record_store():
    return current_app.extensions["record_store"]


def sharing_engine():
    return current_app.extensions["sharing_engine"]


def vitals_series():
    return current_app.extensions["vitals_series"]


def file_store():
    return current_app.extensions["file_store"]
