# coding: utf8
from flask import current_app
from flask_jwt_extended import jwt_required
from flask_restx import Namespace, Resource

from orderhub.decorators import parameters, roles_required
from orderhub.enums.messages import MessageError, MessageSuccess
from orderhub.errors.exceptions import SessionExpired, Unauthorized
from orderhub.lib.logger import logger
from orderhub.lib.response import Response
from orderhub.services.auth import AuthService

ns = Namespace(name="auth", description="Auth API")


@ns.route("/login")
class APILogin(Resource):

    @parameters(
        type="object",
        properties={
            "email": {"type": "string"},
            "password": {"type": "string"},
        },
        required=["email", "password"],
    )
    def post(self, args):
        email = args.get("email", "").strip().lower()
        password = args.get("password", "")

        user = AuthService.login(email, password)
        if not user:
            logger.warning(f"Failed login for {email}")
            raise Unauthorized(
                message=MessageError.WRONG_CREDENTIALS.value["message"],
                data={"message_en": MessageError.WRONG_CREDENTIALS.value["message_en"]},
            )

        tokens = AuthService.generate_token(user)
        tokens.update(
            {
                "type": "Bearer",
                "expires_in": int(
                    current_app.config["JWT_ACCESS_TOKEN_EXPIRES"].total_seconds()
                ),
                "user": user.to_dict(),
            }
        )

        return Response(
            data=tokens,
            message=MessageSuccess.LOGIN.value,
        ).to_dict()


@ns.route("/refresh-token")
class APIRefreshToken(Resource):

    @jwt_required(refresh=True)
    def post(self):
        tokens = AuthService.refresh_token()
        if not tokens:
            raise SessionExpired()
        return Response(data=tokens).to_dict()


@ns.route("/me")
class APIMe(Resource):

    @roles_required()
    def get(self, current_user):
        return Response(data=current_user.to_dict()).to_dict()
