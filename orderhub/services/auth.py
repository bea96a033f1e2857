from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    get_jwt_identity,
)

from orderhub.errors.exceptions import BadRequest
from orderhub.extensions import db
from orderhub.lib.logger import logger
from orderhub.models.user import User
from orderhub.enums.order import UserRole


class AuthService:

    @staticmethod
    def register(email, password, name="", role=UserRole.CUSTOMER.value, **kwargs):
        user = User.query.filter_by(email=email).first()
        if user:
            raise BadRequest(message="Email already exists")
        user = User(email=email, name=name, role=role, **kwargs)
        user.set_password(password)
        user.save()
        return user

    @staticmethod
    def login(email, password):
        user = User.query.filter_by(email=email).first()
        if not user or not user.is_active or not user.check_password(password):
            return None
        return user

    @staticmethod
    def generate_token(user):
        subject = str(user.id)
        claims = {"role": user.role}
        access_token = create_access_token(identity=subject, additional_claims=claims)
        refresh_token = create_refresh_token(identity=subject, additional_claims=claims)
        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
        }

    @staticmethod
    def refresh_token():
        user = AuthService.get_current_identity()
        if not user or not user.is_active:
            return None
        access_token = create_access_token(
            identity=str(user.id), additional_claims={"role": user.role}
        )
        return {"access_token": access_token}

    @staticmethod
    def get_user_id():
        subject = get_jwt_identity()
        return int(subject) if subject is not None else None

    @staticmethod
    def get_current_identity():
        try:
            user_id = AuthService.get_user_id()
            if user_id is None:
                return None
            return db.session.get(User, user_id)
        except (TypeError, ValueError) as e:
            logger.warning(f"Invalid token subject: {e}")
            return None
