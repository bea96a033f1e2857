# coding: utf8
import os
from datetime import timedelta

import const


class Config(object):
    SECRET_KEY = os.environ.get("SECRET_KEY") or "<your secret key>"

    REDIS_URL = os.environ.get("REDIS_URL") or "redis://localhost:6379/0"

    SQLALCHEMY_DATABASE_URI = "{engine}://{user}:{password}@{host}:{port}/{db}".format(
        engine=os.environ.get("SQLALCHEMY_ENGINE") or "mysql+pymysql",
        user=os.environ.get("SQLALCHEMY_USER") or "root",
        password=os.environ.get("SQLALCHEMY_PASSWORD") or "",
        host=os.environ.get("SQLALCHEMY_HOST") or "127.0.0.1",
        port=int(os.environ.get("SQLALCHEMY_PORT", 3306)),
        db=os.environ.get("SQLALCHEMY_DATABASE") or "orderhub",
    )

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_size": 20,
        "max_overflow": 50,
        "pool_timeout": 10,
        "pool_recycle": 900,
        "pool_pre_ping": True,
    }

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY") or "secret"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        minutes=int(os.environ.get("JWT_ACCESS_TOKEN_MINUTES") or 120)
    )
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(
        days=int(os.environ.get("JWT_REFRESH_TOKEN_DAYS") or 30)
    )

    # Shared secret sent by the bank webhook in X-API-KEY
    PAYMENT_WEBHOOK_KEY = os.environ.get("PAYMENT_WEBHOOK_KEY") or "<your webhook key>"
    PAYMENT_WAIT_SECONDS = int(
        os.environ.get("PAYMENT_WAIT_SECONDS") or const.PAYMENT_WAIT_SECONDS
    )
    CHECKOUT_IDEMPOTENCY_WINDOW = int(
        os.environ.get("CHECKOUT_IDEMPOTENCY_WINDOW")
        or const.CHECKOUT_IDEMPOTENCY_WINDOW
    )
    DEFAULT_DELIVERY_FEE = int(
        os.environ.get("DEFAULT_DELIVERY_FEE") or const.DEFAULT_DELIVERY_FEE
    )

    QR_BANK_ID = os.environ.get("QR_BANK_ID") or "VCB"
    QR_ACCOUNT_NO = os.environ.get("QR_ACCOUNT_NO") or "<your account number>"
    QR_ACCOUNT_NAME = os.environ.get("QR_ACCOUNT_NAME") or "<your account name>"
    QR_IMAGE_BASE_URL = os.environ.get("QR_IMAGE_BASE_URL") or "https://img.vietqr.io/image"

    PROPAGATE_EXCEPTIONS = os.environ.get("FLASK_CONFIG") == "production"
    RESTX_ERROR_404_HELP = False


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET_KEY = "testing-secret-key-with-enough-length"
    PAYMENT_WEBHOOK_KEY = "test-webhook-key"
    QR_ACCOUNT_NO = "19036735544018"
    QR_ACCOUNT_NAME = "ORDERHUB TEST"


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
    TESTING = False


configs = {
    "develop": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
