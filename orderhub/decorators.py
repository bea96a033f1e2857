# coding: utf8
import hmac
from functools import wraps

from flask import current_app, request
from flask_jwt_extended import verify_jwt_in_request
from jsonschema import FormatChecker, validate
from jsonschema.exceptions import ValidationError
from orderhub.errors.exceptions import BadRequest, PermissionDenied, Unauthorized
from orderhub.services.auth import AuthService


def roles_required(*roles):
    """Verify the bearer token and pass the current user as ``current_user``."""

    def wrapper(fn):
        @wraps(fn)
        def decorator(*args, **kwargs):
            verify_jwt_in_request()

            current_user = AuthService.get_current_identity()
            if not current_user or not current_user.is_active:
                raise Unauthorized(message="Unauthorized")
            if roles and current_user.role not in roles:
                raise PermissionDenied()

            kwargs["current_user"] = current_user
            return fn(*args, **kwargs)

        return decorator

    return wrapper


def require_api_key(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        api_key = request.headers.get("X-API-KEY") or ""
        expected = current_app.config["PAYMENT_WEBHOOK_KEY"]
        if not api_key or not hmac.compare_digest(api_key, expected):
            raise Unauthorized(message="Invalid API key")
        return fn(*args, **kwargs)

    return wrapper


def parameters(**schema):
    def decorated(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            req_args = request.args.to_dict()
            if (
                request.method in ("POST", "PUT", "PATCH", "DELETE")
                and request.mimetype == "application/json"
            ):
                req_args.update(request.get_json(silent=True) or {})

            if (
                request.method in ("POST", "PUT", "PATCH", "DELETE")
                and request.mimetype == "multipart/form-data"
            ):
                req_args.update(request.form.to_dict())

            req_args = {
                k: v for k, v in req_args.items() if k in schema["properties"].keys()
            }

            if "required" in schema:
                for field in schema["required"]:
                    if field not in req_args or req_args[field] in (None, ""):
                        field_name = field
                        if field in schema["properties"]:
                            if "name" in schema["properties"][field]:
                                field_name = schema["properties"][field]["name"]
                        raise BadRequest(
                            message="{} is required".format(field_name),
                            data={"field": field},
                        )

            try:
                validate(
                    instance=req_args, schema=schema, format_checker=FormatChecker()
                )
            except ValidationError as exp:
                exp_info = list(exp.schema_path)
                error_type = (
                    "type",
                    "format",
                    "pattern",
                    "maxLength",
                    "minLength",
                    "enum",
                )

                if set(exp_info).intersection(set(error_type)) and len(exp_info) > 1:
                    field = exp_info[1]
                    field_config = schema["properties"].get(field, {})
                    valid_values = field_config.get("enum", [])

                    message = f"Field '{field}' is not valid."
                    if valid_values:
                        enum_values = ", ".join(str(v) for v in valid_values)
                        message += f" Valid values: {enum_values}."
                    raise BadRequest(message=message, data={"field": field})

                raise BadRequest(message="Request parameters are invalid.")

            new_args = args + (req_args,)
            return func(*new_args, **kwargs)

        return wrapper

    return decorated
