# health_records/models.py

from datetime import datetime, timezone
from health_records.extensions import db


def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(db.Model):
    __tablename__ = "users"
    id             = db.Column(db.Integer, primary_key=True)
    username       = db.Column(db.String(50), unique=True, nullable=False)
    password_hash  = db.Column(db.Text, nullable=False)
    role           = db.Column(db.String(20), nullable=False, default="owner")  # owner | viewer
    created_at     = db.Column(db.DateTime, default=utcnow)


class Report(db.Model):
    __tablename__ = "reports"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), index=True, nullable=False)
    title = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(100), nullable=False)  # Blood Test, X-Ray, MRI, ...
    report_date = db.Column(db.Date, nullable=False)
    file_path = db.Column(db.String(500), nullable=False)
    summary = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)


class Vital(db.Model):
    __tablename__ = "vitals"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), index=True, nullable=False)
    type = db.Column(db.String(100), nullable=False)
    # free text so composite readings such as "120/80" survive untouched
    value = db.Column(db.String(100), nullable=False)
    unit = db.Column(db.String(50), nullable=False)
    observed_at = db.Column(db.DateTime, index=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)


class Share(db.Model):
    __tablename__ = "shares"

    id = db.Column(db.Integer, primary_key=True)
    report_id = db.Column(db.Integer, db.ForeignKey("reports.id"), index=True, nullable=False)
    shared_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    # target is matched by username text, not by user id
    shared_with_username = db.Column(db.String(50), index=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)


class TokenBlocklist(db.Model):
    __tablename__ = "token_blocklist"

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(36), unique=True, index=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
