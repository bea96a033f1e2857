# coding: utf8
from datetime import datetime
import json
import os

import pytz
from sqlalchemy import inspect

from orderhub.extensions import db


class BaseModel:
    __abstract__ = True

    created_at = db.Column(db.DateTime, default=datetime.now)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)

    print_filter = ()
    to_json_filter = ()
    to_json_parse = ()

    def __repr__(self):
        """Define a base way to print models
        Columns inside `print_filter` are excluded"""
        return "%s(%s)" % (
            self.__class__.__name__,
            {
                column: value
                for column, value in self._to_dict().items()
                if column not in self.print_filter
            },
        )

    def _to_json(self):
        """Define a base way to jsonify models
        Columns inside `to_json_filter` are excluded.
        Naive datetimes are stored in the server timezone (TZ)."""
        tz = pytz.timezone(os.environ.get("TZ") or "Asia/Ho_Chi_Minh")

        response = {}
        for column, value in self._to_dict().items():
            if isinstance(value, db.Model):
                continue

            if isinstance(value, list) and all(
                isinstance(item, db.Model) for item in value
            ):
                continue

            if column in self.to_json_filter:
                continue
            if column in self.to_json_parse:
                if value and isinstance(value, str):
                    response[column] = json.loads(value)
            elif isinstance(value, datetime):
                if value.tzinfo is None:
                    value = tz.localize(value)
                response[column] = value.isoformat()
            else:
                response[column] = value

        return response

    def _to_dict(self):
        return {
            column.key: getattr(self, column.key)
            for column in inspect(self.__class__).column_attrs
        }

    def save(self):
        db.session.add(self)
        db.session.commit()
        return self

    def update(self, **kwargs):
        for key, value in kwargs.items():
            setattr(self, key, value)
        db.session.commit()
        return self

    def delete(self):
        db.session.delete(self)
        db.session.commit()
