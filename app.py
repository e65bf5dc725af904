# app.py
import json
import logging
import os

import click
from flask import Flask, jsonify, redirect
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import RequestEntityTooLarge

import auth
from config import Config
from errors import PortalError, StorageError, Unauthenticated
from models import User, db, init_db
from services import Services

log = logging.getLogger(__name__)


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(level=app.config["LOG_LEVEL"])
    os.makedirs(app.config["DATA_DIR"], exist_ok=True)

    db.init_app(app)
    auth.login_manager.init_app(app)

    # storage is ready before the first request can arrive
    with app.app_context():
        init_db()
        auth.bootstrap_admin(app.config.get("ADMIN_USER"), app.config.get("ADMIN_PASS"))
    app.extensions["portal"] = Services(app.config["DATA_DIR"],
                                        seed=app.config.get("SEED_DATA", True))

    from admin_routes import bp as admin_bp
    from auth_routes import bp as auth_bp
    from views import bp as portal_bp
    app.register_blueprint(auth_bp)
    app.register_blueprint(portal_bp)
    app.register_blueprint(admin_bp)

    register_error_handlers(app)
    register_commands(app)
    return app


def register_error_handlers(app):

    @app.errorhandler(Unauthenticated)
    def unauthenticated(e):
        return redirect(auth.login_page_for(e.role))

    @app.errorhandler(PortalError)
    def portal_error(e):
        if isinstance(e, StorageError):
            log.error("Storage error: %s", e.__cause__ or e)
        return jsonify(error=e.message), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def database_error(e):
        db.session.rollback()
        log.error("Database error: %s", e)
        return jsonify(error=StorageError.message), 500

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(e):
        return jsonify(error="Upload too large (2 MB max)"), 413


def register_commands(app):

    @app.cli.command("init-db")
    def init_db_command():
        """Create tables and apply pending column migrations."""
        added = init_db()
        click.echo(f"Database ready. Columns added: {', '.join(added) or 'none'}")

    @app.cli.command("create-admin")
    @click.argument("username")
    @click.argument("password")
    def create_admin_command(username, password):
        """Create an admin account."""
        try:
            auth.create_account(username, password, "admin")
        except PortalError as e:
            raise click.ClickException(e.message)
        click.echo(f"Admin {username} created")

    @app.cli.command("list-admins")
    def list_admins_command():
        """Print admin accounts as JSON."""
        admins = User.query.filter_by(role="admin").order_by(User.id).all()
        if not admins:
            click.echo("NO_ADMIN_ROWS")
            return
        rows = []
        for u in admins:
            data = u.to_dict()
            rows.append({k: data[k] for k in ("id", "username", "role", "created_at")})
        click.echo(json.dumps(rows, indent=2))


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 3000))
    create_app().run(debug=True, port=port)
