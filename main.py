# coding: utf8
from gevent import monkey

monkey.patch_all()

import os

from dotenv import load_dotenv

dotenv_path = os.path.join(os.path.dirname(__file__), ".env")
load_dotenv(dotenv_path=dotenv_path, override=True)

from orderhub import create_app  # noqa
from orderhub.config import configs as config  # noqa

config_name = os.environ.get("FLASK_CONFIG") or "develop"
config_app = config[config_name]
application = create_app(config_app)


if __name__ == "__main__":
    application.run()
