from cleanserve.core.i18n import message_pair


def ok(message_key: str, data=None) -> dict:
    return {"success": True, **message_pair(message_key), "data": data}


def error_body(message_key: str, error: str, errors=None) -> dict:
    body = {"success": False, **message_pair(message_key), "error": error}
    if errors is not None:
        body["errors"] = errors
    return body
