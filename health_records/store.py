# -*- coding: utf-8 -*-
"""
Record store: durable CRUD for users, reports, vitals and shares.

The sharing engine and the vitals series only ever talk to a ``RecordStore``.
Referential validity (a report's owner exists, a share's report exists) is the
caller's job; the store only enforces username uniqueness.
"""

from abc import ABC, abstractmethod

from sqlalchemy.exc import IntegrityError

from health_records.errors import Conflict
from health_records.models import Report, Share, TokenBlocklist, User, Vital


class RecordStore(ABC):

    # === USERS ===
    @abstractmethod
    def get_user(self, user_id): ...

    @abstractmethod
    def get_user_by_username(self, username): ...

    @abstractmethod
    def create_user(self, username, password_hash, role="owner"):
        """Raises ``Conflict`` when the username is taken."""

    # === REPORTS ===
    @abstractmethod
    def get_report(self, report_id): ...

    @abstractmethod
    def list_reports(self, user_id, type=None, date_from=None, date_to=None):
        """Reports owned by ``user_id``, ``report_date`` descending."""

    @abstractmethod
    def create_report(self, user_id, title, type, report_date, file_path, summary=None): ...

    @abstractmethod
    def delete_report(self, report_id):
        """Delete a report together with every share pointing at it.

        Returns the number of shares removed.
        """

    # === VITALS ===
    @abstractmethod
    def list_vitals(self, user_id, type=None, since=None, limit=None):
        """Vitals owned by ``user_id``, ``observed_at`` descending, at most ``limit``."""

    @abstractmethod
    def create_vital(self, user_id, type, value, unit, observed_at): ...

    # === SHARES ===
    @abstractmethod
    def create_share(self, report_id, shared_by_user_id, shared_with_username): ...

    @abstractmethod
    def find_share(self, report_id, username):
        """Any share granting ``username`` access to ``report_id``, or None."""

    @abstractmethod
    def list_shared_with(self, username):
        """``(share, report)`` pairs for ``username``, newest share first."""

    # === TOKENS ===
    @abstractmethod
    def revoke_token(self, jti): ...

    @abstractmethod
    def is_token_revoked(self, jti): ...


class SQLAlchemyRecordStore(RecordStore):
    """Record store backed by the Flask-SQLAlchemy session."""

    def __init__(self, db):
        self.db = db

    def _add(self, obj):
        self.db.session.add(obj)
        self.db.session.commit()
        return obj

    # === USERS ===
    def get_user(self, user_id):
        return self.db.session.get(User, user_id)

    def get_user_by_username(self, username):
        return User.query.filter_by(username=username).first()

    def create_user(self, username, password_hash, role="owner"):
        try:
            return self._add(User(username=username, password_hash=password_hash, role=role))
        except IntegrityError:
            self.db.session.rollback()
            raise Conflict("Username already exists", errors={"username": ["Username already exists."]})

    # === REPORTS ===
    def get_report(self, report_id):
        return self.db.session.get(Report, report_id)

    def list_reports(self, user_id, type=None, date_from=None, date_to=None):
        q = Report.query.filter_by(user_id=user_id)
        if type:
            q = q.filter(Report.type == type)
        if date_from:
            q = q.filter(Report.report_date >= date_from)
        if date_to:
            q = q.filter(Report.report_date <= date_to)
        return q.order_by(Report.report_date.desc(), Report.id.desc()).all()

    def create_report(self, user_id, title, type, report_date, file_path, summary=None):
        return self._add(Report(
            user_id=user_id,
            title=title,
            type=type,
            report_date=report_date,
            file_path=file_path,
            summary=summary,
        ))

    def delete_report(self, report_id):
        try:
            dropped = Share.query.filter_by(report_id=report_id).delete(synchronize_session=False)
            Report.query.filter_by(id=report_id).delete(synchronize_session=False)
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            raise
        return dropped

    # === VITALS ===
    def list_vitals(self, user_id, type=None, since=None, limit=None):
        q = Vital.query.filter_by(user_id=user_id)
        if type:
            q = q.filter(Vital.type == type)
        if since is not None:
            q = q.filter(Vital.observed_at >= since)
        q = q.order_by(Vital.observed_at.desc(), Vital.id.desc())
        if limit:
            q = q.limit(limit)
        return q.all()

    def create_vital(self, user_id, type, value, unit, observed_at):
        return self._add(Vital(
            user_id=user_id,
            type=type,
            value=value,
            unit=unit,
            observed_at=observed_at,
        ))

    # === SHARES ===
    def create_share(self, report_id, shared_by_user_id, shared_with_username):
        return self._add(Share(
            report_id=report_id,
            shared_by_user_id=shared_by_user_id,
            shared_with_username=shared_with_username,
        ))

    def find_share(self, report_id, username):
        return Share.query.filter_by(report_id=report_id, shared_with_username=username).first()

    def list_shared_with(self, username):
        rows = (
            self.db.session.query(Share, Report)
            .join(Report, Share.report_id == Report.id)
            .filter(Share.shared_with_username == username)
            .order_by(Share.created_at.desc(), Share.id.desc())
            .all()
        )
        return [(share, report) for share, report in rows]

    # === TOKENS ===
    def revoke_token(self, jti):
        return self._add(TokenBlocklist(jti=jti))

    def is_token_revoked(self, jti):
        return TokenBlocklist.query.filter_by(jti=jti).first() is not None
