from orderhub.extensions import db, bcrypt
from orderhub.models.base import BaseModel
from orderhub.enums.order import UserRole

import const


class User(db.Model, BaseModel):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(150), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=True, default="")
    password = db.Column(db.String(200), nullable=True)
    phone = db.Column(db.String(30), nullable=True)
    address = db.Column(db.String(500), nullable=True)
    role = db.Column(db.String(20), nullable=False, default=UserRole.CUSTOMER.value)
    store_id = db.Column(db.String(64), nullable=True)
    status = db.Column(db.Integer, default=const.USER_ACTIVE)

    print_filter = ("password",)
    to_json_filter = ("password",)

    def set_password(self, password):
        self.password = bcrypt.generate_password_hash(password).decode("utf-8")

    def check_password(self, password):
        if not self.password:
            return False
        return bcrypt.check_password_hash(self.password, password)

    @property
    def is_active(self):
        return self.status == const.USER_ACTIVE

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "address": self.address,
            "role": self.role,
            "store_id": self.store_id,
        }
