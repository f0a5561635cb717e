import mimetypes
import os

from flask import Blueprint, Response, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.utils import secure_filename

from health_records.errors import NotFound, ValidationFailed
from health_records.routes import current_actor, file_store, sharing_engine
from health_records.schemas import (
    ReportFilterSchema,
    ReportUploadSchema,
    parse,
    report_schema,
    reports_schema,
)

reports_bp = Blueprint('reports', __name__, url_prefix='/api/reports')
upload_schema = ReportUploadSchema()
filter_schema = ReportFilterSchema()


@reports_bp.route('', methods=['GET'])
@jwt_required()
def list_reports():
    filters = parse(filter_schema, request.args.to_dict())
    reports = sharing_engine().list_reports(current_actor(), **filters)
    return jsonify(reports_schema.dump(reports)), 200


@reports_bp.route('', methods=['POST'])
@jwt_required()
def upload_report():
    actor = current_actor()
    file = request.files.get('file')
    if not file or not file.filename:
        raise ValidationFailed("No file uploaded", errors={"file": ["No file uploaded."]})
    data = parse(upload_schema, request.form.to_dict())

    store = file_store()
    key = store.save(file.read(), actor.id, file.filename)
    try:
        report = sharing_engine().create_report(actor, file_path=key, **data)
    except Exception:
        store.delete(key)
        raise

    current_app.logger.info(f"User {actor.id} uploaded report {report.id} ({key})")
    return jsonify(report_schema.dump(report)), 201


@reports_bp.route('/<int:report_id>', methods=['GET'])
@jwt_required()
def get_report(report_id):
    report = sharing_engine().authorize_read(current_actor(), report_id)
    return jsonify(report_schema.dump(report)), 200


@reports_bp.route('/<int:report_id>/file', methods=['GET'])
@jwt_required()
def download_report_file(report_id):
    report = sharing_engine().authorize_read(current_actor(), report_id)
    try:
        data = file_store().read(report.file_path)
    except FileNotFoundError:
        current_app.logger.error(f"Stored file missing for report {report.id}: {report.file_path}")
        raise NotFound("Report file not found")

    ext = os.path.splitext(report.file_path)[1]
    filename = (secure_filename(report.title) or f"report-{report.id}") + ext
    mimetype = mimetypes.guess_type(filename)[0] or 'application/octet-stream'

    resp = Response(data, mimetype=mimetype)
    resp.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    resp.headers["Access-Control-Expose-Headers"] = "Content-Disposition"
    return resp


@reports_bp.route('/<int:report_id>', methods=['DELETE'])
@jwt_required()
def delete_report(report_id):
    file_path = sharing_engine().delete_report(current_actor(), report_id)
    try:
        file_store().delete(file_path)
    except (RuntimeError, OSError) as e:
        # the row is already gone; an orphaned object is left for cleanup
        current_app.logger.error(f"Could not remove file {file_path} of deleted report {report_id}: {e}")
    return '', 204
