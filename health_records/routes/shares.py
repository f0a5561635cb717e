from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from health_records.routes import current_actor, sharing_engine
from health_records.schemas import ShareCreateSchema, dump_shared, parse, share_schema

shares_bp = Blueprint('shares', __name__, url_prefix='/api/shares')
create_schema = ShareCreateSchema()


@shares_bp.route('', methods=['POST'])
@jwt_required()
def create_share():
    data = parse(create_schema, request.get_json(silent=True))
    share = sharing_engine().create_share(
        current_actor(), data['report_id'], data['shared_with_username']
    )
    return jsonify(share_schema.dump(share)), 201


@shares_bp.route('', methods=['GET'])
@jwt_required()
def shared_with_me():
    actor = current_actor()
    return jsonify(dump_shared(sharing_engine().list_shared_with_me(actor.username))), 200
