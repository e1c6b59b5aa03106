# docstore/extensions.py
from flask import current_app
from flask_cors import CORS

from .storage.json_store import JsonStore

# CORS is a real Flask extension (keeps init_app)
cors = CORS()

EXTENSION_KEY = "docstore"


def init_store(app) -> JsonStore:
    """Open the store under DATA_DIR and attach it to the app."""
    store = JsonStore(app.config["DATA_DIR"], logger=app.logger)
    app.extensions[EXTENSION_KEY] = store
    return store


def get_store() -> JsonStore:
    return current_app.extensions[EXTENSION_KEY]
