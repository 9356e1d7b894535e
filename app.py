import logging

from flask import Flask, jsonify
from config import Config
from routes import health_bp, booking_bp, templates_bp, logs_bp

from models import db
from flask_migrate import Migrate
from scheduling.catalog import build_default_catalog
from scheduling.errors import SchedulingError
from scheduling.worker import init_scheduler


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(templates_bp)
    app.register_blueprint(logs_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Time catalog: built once, read-only afterwards
    app.extensions["schedule_catalog"] = build_default_catalog()

    @app.errorhandler(SchedulingError)
    def _scheduling_error(exc):
        return jsonify(error=exc.message), exc.status_code

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    if app.config.get("SCHEDULER_ENABLED") and not app.config.get("TESTING"):
        init_scheduler(app)

    return app

#-------------------------
import click
from scheduling import generator
from scheduling.settlement import run_settlement_sweep
from utils.dates import parse_date

def register_cli(app):
    @app.cli.command("generate-slots")
    @click.argument("season_id")
    @click.option("--start", help="First day (YYYY-MM-DD); defaults to the season start")
    @click.option("--end", help="Last day (YYYY-MM-DD); defaults to the season end")
    @click.confirmation_option(prompt="This deletes existing slots (and bookings) in the range. Continue?")
    def generate_slots(season_id, start, end):
        """Rebuild daily slots for a season from its templates."""
        catalog = app.extensions["schedule_catalog"]
        try:
            if start or end:
                created = generator.generate_daily_slots(catalog, season_id, parse_date(start), parse_date(end))
            else:
                created = generator.generate_for_season(catalog, season_id)
        except ValueError:
            raise click.BadParameter("dates must be YYYY-MM-DD")
        except SchedulingError as exc:
            raise click.ClickException(exc.message)
        click.echo(f"{created} slots created")

    @app.cli.command("seed-slots")
    @click.argument("start")
    @click.argument("days", type=int)
    def seed_slots(start, days):
        """Bootstrap slots from the static age rules and fixed schedules."""
        try:
            written = generator.generate_from_rules(app.extensions["schedule_catalog"], parse_date(start), days)
        except ValueError:
            raise click.BadParameter("start must be YYYY-MM-DD")
        except SchedulingError as exc:
            raise click.ClickException(exc.message)
        click.echo(f"{written} slots written")

    @app.cli.command("sweep")
    def sweep():
        """Charge credits for classes that have ended."""
        result = run_settlement_sweep()
        click.echo(
            f"scanned={result.scanned} settled={result.settled_slots} "
            f"charged={result.charged} missing={result.missing_students} "
            f"failed={len(result.failed_slots)}"
        )

    @app.cli.command("clear-slots")
    @click.confirmation_option(prompt="Delete ALL daily slots?")
    def clear_slots():
        """Delete every daily slot."""
        click.echo(f"{generator.clear_slots()} slots deleted")

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
