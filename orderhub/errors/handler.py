# coding: utf8
from werkzeug.exceptions import HTTPException

from orderhub.errors.exceptions import ApiException
from orderhub.lib.logger import logger


def api_error_handler(error):
    if isinstance(error, ApiException):
        if error.status_code >= 500:
            logger.error(f"{error.error_code}: {error.message}")
        return error.to_dict(), error.status_code

    if isinstance(error, HTTPException):
        return (
            {
                "code": error.code,
                "message": error.description,
                "data": {"error": error.name.upper().replace(" ", "_")},
            },
            error.code,
        )

    logger.exception(f"Unhandled exception: {error}")
    return (
        {
            "code": 500,
            "message": "Internal Server Error",
            "data": {"error": "INTERNAL_ERROR"},
        },
        500,
    )
