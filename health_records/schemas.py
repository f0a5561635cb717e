# health_records/schemas.py
"""Request validation and response shapes for the JSON API (camelCase on the wire)."""

from datetime import timezone

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load, validate

from health_records.errors import ValidationFailed

required_text = dict(required=True, validate=validate.Length(min=1))


def parse(schema, data):
    """Load ``data`` through ``schema`` or raise ``ValidationFailed`` with field errors."""
    if data is None:
        raise ValidationFailed("Request body is missing or not JSON")
    try:
        return schema.load(data)
    except ValidationError as e:
        raise ValidationFailed(errors=e.normalized_messages()) from e


def _naive_utc(dt):
    if dt is not None and dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


# === REQUESTS ===

class RegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    password = fields.Str(**required_text)
    role     = fields.Str(load_default="owner", validate=validate.OneOf(["owner", "viewer"]))


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.Str(required=True)
    password = fields.Str(required=True)


class ReportUploadSchema(Schema):
    """Text fields of the multipart report upload; the file is checked separately."""
    class Meta:
        unknown = EXCLUDE

    title       = fields.Str(**required_text)
    type        = fields.Str(**required_text)
    report_date = fields.Date(required=True, data_key="reportDate")
    summary     = fields.Str(load_default=None, allow_none=True)

    @post_load
    def blank_summary(self, data, **kwargs):
        if not (data.get("summary") or "").strip():
            data["summary"] = None
        return data


class ReportFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    type      = fields.Str(load_default=None)
    date_from = fields.Date(load_default=None, data_key="from")
    date_to   = fields.Date(load_default=None, data_key="to")


class VitalCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    type        = fields.Str(**required_text)
    value       = fields.Str(**required_text)
    unit        = fields.Str(**required_text)
    observed_at = fields.DateTime(required=True, data_key="date")

    @post_load
    def to_utc(self, data, **kwargs):
        data["observed_at"] = _naive_utc(data["observed_at"])
        return data


class VitalFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    type  = fields.Str(load_default=None)
    days  = fields.Int(load_default=None, validate=validate.Range(min=0, max=36500))
    limit = fields.Int(load_default=None, validate=validate.Range(min=1))


class ShareCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    report_id            = fields.Int(required=True, strict=True, data_key="reportId")
    shared_with_username = fields.Str(data_key="sharedWithUsername", **required_text)


# === RESPONSES ===

class UserSchema(Schema):
    id         = fields.Int(dump_only=True)
    username   = fields.Str()
    role       = fields.Str()
    created_at = fields.DateTime(dump_only=True, data_key="createdAt")


class ReportSchema(Schema):
    id          = fields.Int(dump_only=True)
    user_id     = fields.Int(data_key="userId")
    title       = fields.Str()
    type        = fields.Str()
    report_date = fields.Date(data_key="reportDate")
    file_path   = fields.Str(data_key="filePath")
    summary     = fields.Str(allow_none=True)
    created_at  = fields.DateTime(dump_only=True, data_key="createdAt")


class VitalSchema(Schema):
    id          = fields.Int(dump_only=True)
    user_id     = fields.Int(data_key="userId")
    type        = fields.Str()
    value       = fields.Str()
    unit        = fields.Str()
    observed_at = fields.DateTime(data_key="date")
    created_at  = fields.DateTime(dump_only=True, data_key="createdAt")


class ShareSchema(Schema):
    id                   = fields.Int(dump_only=True)
    report_id            = fields.Int(data_key="reportId")
    shared_by_user_id    = fields.Int(data_key="sharedByUserId")
    shared_with_username = fields.Str(data_key="sharedWithUsername")
    created_at           = fields.DateTime(dump_only=True, data_key="createdAt")


user_schema = UserSchema()
report_schema = ReportSchema()
reports_schema = ReportSchema(many=True)
vital_schema = VitalSchema()
vitals_schema = VitalSchema(many=True)
share_schema = ShareSchema()


def dump_shared(pairs):
    return [
        dict(share_schema.dump(share), report=report_schema.dump(report))
        for share, report in pairs
    ]


def dump_chart(points):
    return [
        {
            "date": v.observed_at.isoformat(),
            "value": v.value,
            "numericValue": n,
        }
        for v, n in points
    ]
