# -*- coding: utf-8 -*-
"""
Ownership and sharing rules for medical reports.

Every report-scoped operation goes through ``SharingEngine`` with an explicit
``Actor``. Only the owner may write, delete or share a report; a share grants
its target read access and nothing else. Shares are matched against the
actor's *current* username, so a grant follows the name, not the account.
"""

from collections import namedtuple

from flask import current_app

from health_records.errors import Forbidden, NotFound

Actor = namedtuple("Actor", ["id", "username"])


def actor_for(user):
    return Actor(user.id, user.username)


class SharingEngine:

    def __init__(self, store):
        self.store = store

    def _get_report(self, report_id):
        report = self.store.get_report(report_id)
        if report is None:
            raise NotFound("Report not found")
        return report

    def authorize_read(self, actor, report_id):
        """Return the report if ``actor`` owns it or it was shared with them.

        Raises ``NotFound`` for a missing report and ``Forbidden`` otherwise.
        """
        report = self._get_report(report_id)
        if report.user_id == actor.id:
            return report
        if self.store.find_share(report.id, actor.username) is not None:
            return report
        raise Forbidden("You do not have access to this report")

    def authorize_write(self, actor, report_id):
        """Return the report if ``actor`` owns it. Shares never grant write."""
        report = self._get_report(report_id)
        if report.user_id != actor.id:
            raise Forbidden("Only the owner can modify this report")
        return report

    def create_share(self, actor, report_id, target_username):
        """Grant ``target_username`` read access to one of the actor's reports.

        A missing report and someone else's report both answer ``NotFound``.
        Repeated grants to the same target are stored as separate shares.
        """
        report = self.store.get_report(report_id)
        if report is None or report.user_id != actor.id:
            raise NotFound("Report not found or not owned")

        if self.store.get_user_by_username(target_username) is None:
            raise NotFound("Target user not found")

        share = self.store.create_share(report.id, actor.id, target_username)
        current_app.logger.info(f"User {actor.id} shared report {report.id} with '{target_username}'")
        return share

    def list_shared_with_me(self, username):
        """``(share, report)`` pairs shared with ``username``, newest first."""
        return self.store.list_shared_with(username)

    # === OWNER OPERATIONS ===

    def list_reports(self, actor, type=None, date_from=None, date_to=None):
        return self.store.list_reports(actor.id, type=type, date_from=date_from, date_to=date_to)

    def create_report(self, actor, title, type, report_date, file_path, summary=None):
        return self.store.create_report(actor.id, title, type, report_date, file_path, summary)

    def delete_report(self, actor, report_id):
        """Delete an owned report and every share of it.

        Grantees stop seeing the report in their shared list as soon as this
        returns. The path of the deleted report's file is returned so the
        caller can remove it.
        """
        report = self.authorize_write(actor, report_id)
        report_id, file_path = report.id, report.file_path
        dropped = self.store.delete_report(report_id)
        current_app.logger.info(f"User {actor.id} deleted report {report_id} ({dropped} share(s) removed)")
        return file_path
