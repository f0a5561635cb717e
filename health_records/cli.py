from datetime import date

import click

from health_records.extensions import db
from health_records.models import utcnow
from health_records.routes.auth import hash_password


def register_commands(app):

    @app.cli.command("init-db")
    def init_db():
        """Create every table that does not exist yet."""
        db.create_all()
        click.echo("Database initialised.")

    @app.cli.command("seed")
    @click.option("--password", default="admin123", show_default=True)
    def seed(password):
        """Create the demo ``admin`` account with a sample report and vitals."""
        store = app.extensions["record_store"]
        if store.get_user_by_username("admin") is not None:
            click.echo("Seed data already present.")
            return

        admin = store.create_user("admin", hash_password(password), role="owner")
        store.create_report(
            admin.id,
            title="Annual Blood Work",
            type="Blood Test",
            report_date=date.today(),
            file_path=app.extensions["file_store"].save(b"", admin.id, "sample-report.pdf"),
            summary="All values within normal range.",
        )
        now = utcnow()
        store.create_vital(admin.id, "Blood Pressure", "120/80", "mmHg", now)
        store.create_vital(admin.id, "Heart Rate", "72", "bpm", now)
        click.echo(f"Seeded user 'admin' (id={admin.id}).")
