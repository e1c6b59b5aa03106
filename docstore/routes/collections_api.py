import json

from flask import Blueprint, current_app, jsonify, request

from .. import __version__
from ..extensions import get_store
from ..storage.errors import (
    DecodeError,
    EncodeError,
    NotFoundError,
    StoreIOError,
    ValidationError,
)

bp = Blueprint("collections_api", __name__)


@bp.errorhandler(ValidationError)
@bp.errorhandler(EncodeError)
def _bad_request(err):
    return jsonify({"error": str(err)}), 400


@bp.errorhandler(NotFoundError)
def _not_found(err):
    return jsonify({"error": str(err)}), 404


@bp.errorhandler(DecodeError)
def _undecodable(err):
    return jsonify({"error": str(err)}), 422


@bp.errorhandler(StoreIOError)
def _io_failure(err):
    current_app.logger.exception("Store I/O failure")
    return jsonify({"error": str(err)}), 500


@bp.get("/version")
def version():
    return jsonify({"version": __version__})


@bp.get("/collections/<collection>")
def list_records(collection):
    records = []
    for raw in get_store().read_all(collection):
        try:
            records.append(json.loads(raw))
        except json.JSONDecodeError as e:
            raise DecodeError(f"Collection {collection} holds a record that is not valid JSON: {e}") from e
    return jsonify(records)


@bp.get("/collections/<collection>/<resource>")
def get_record(collection, resource):
    return jsonify(get_store().read(collection, resource))


@bp.put("/collections/<collection>/<resource>")
def put_record(collection, resource):
    payload = request.get_json(silent=True)
    if payload is None:
        return jsonify({"error": "Request body must be JSON"}), 400
    get_store().write(collection, resource, payload)
    return jsonify(payload), 200


@bp.delete("/collections/<collection>/<resource>")
def delete_record(collection, resource):
    get_store().delete(collection, resource)
    return "", 204
