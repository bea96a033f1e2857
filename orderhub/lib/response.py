from orderhub.lib.logger import logger


class Response:

    def __init__(self, code=200, message="", data=None, status=200, message_en=""):
        try:
            self.status = status
            self.message = message
            self.message_en = message_en
            self.data = data if data is not None else {}
            self.code = code
        except Exception as e:
            logger.error(f"Error in Response __init__: {e}")
            self.status = 500
            self.message = "Internal Server Error"
            self.message_en = ""
            self.data = {}
            self.code = 500

    def to_dict(self):
        try:
            body = {
                "code": self.code,
                "message": self.message,
                "data": self.data,
            }
            if self.message_en:
                body["message_en"] = self.message_en
            return body, self.status
        except Exception as e:
            logger.error(f"Error in Response to_dict: {e}")
            return {"code": 500, "message": "Internal Server Error", "data": {}}, 500
