# coding: utf8
from logging import DEBUG
import os

from werkzeug.exceptions import default_exceptions

from .errors.handler import api_error_handler

from flask import Flask, jsonify
from flask_cors import CORS
from .extensions import redis_client, db, bcrypt, jwt


def create_app(config_app):
    app = Flask(__name__)

    cors_scheme = os.environ.get("CORS_SCHEME") or "*"

    CORS(app, resources={r"/*": {"origins": cors_scheme}})
    app.config.from_object(config_app)
    __init_app(app)
    __config_logging(app)
    __register_blueprint(app)
    __config_error_handlers(app)

    return app


def __config_logging(app):
    app.logger.setLevel(DEBUG)
    app.logger.info("Start flask...")


def __register_blueprint(app):
    from orderhub.api import bp as api_bp

    app.register_blueprint(api_bp)

    @app.route("/", methods=["GET"])
    def index():
        return {"message": "Welcome to the Orderhub API"}


def __init_app(app):
    db.init_app(app)
    redis_client.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)

    app.logger.info("Initial app...")


def _unauthorized(message):
    return (
        jsonify({"code": 401, "message": message, "data": {"error": "UNAUTHORIZED"}}),
        401,
    )


def __config_error_handlers(app):
    for exp in default_exceptions:
        app.register_error_handler(exp, api_error_handler)
    app.register_error_handler(Exception, api_error_handler)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return _unauthorized("The token has expired")

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        return _unauthorized("Invalid token")

    @jwt.unauthorized_loader
    def unauthorized_callback(reason):
        return _unauthorized("Missing Authorization Header")

    @jwt.user_lookup_error_loader
    def user_lookup_error_callback(jwt_header, jwt_payload):
        return _unauthorized("User not found")
