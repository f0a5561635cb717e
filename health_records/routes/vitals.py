from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from health_records.routes import current_actor, vitals_series
from health_records.schemas import (
    VitalCreateSchema,
    VitalFilterSchema,
    dump_chart,
    parse,
    vital_schema,
    vitals_schema,
)
from health_records.vitals import chart_series

vitals_bp = Blueprint('vitals', __name__, url_prefix='/api/vitals')
create_schema = VitalCreateSchema()
filter_schema = VitalFilterSchema()


@vitals_bp.route('', methods=['GET'])
@jwt_required()
def list_vitals():
    f = parse(filter_schema, request.args.to_dict())
    vitals = vitals_series().list_vitals(
        current_actor(), type=f['type'], since_days=f['days'], limit=f['limit']
    )
    return jsonify(vitals_schema.dump(vitals)), 200


@vitals_bp.route('', methods=['POST'])
@jwt_required()
def record_vital():
    actor = current_actor()
    data = parse(create_schema, request.get_json(silent=True))
    vital = vitals_series().record_vital(actor, **data)
    current_app.logger.info(f"User {actor.id} recorded {vital.type} vital {vital.id}")
    return jsonify(vital_schema.dump(vital)), 201


@vitals_bp.route('/latest', methods=['GET'])
@jwt_required()
def latest_vitals():
    return jsonify(vitals_schema.dump(vitals_series().latest(current_actor()))), 200


@vitals_bp.route('/chart', methods=['GET'])
@jwt_required()
def vitals_chart():
    f = parse(filter_schema, request.args.to_dict())
    vitals = vitals_series().list_vitals(
        current_actor(), type=f['type'], since_days=f['days'], limit=f['limit']
    )
    return jsonify(dump_chart(chart_series(vitals))), 200
