from flask import jsonify

def jerror(status: int, code: str, message: str, details=None):
    payload = {"code": code, "message": message}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def jerror_from(exc):
    """Renders an ``AppError`` with the status and code it carries."""
    return jerror(exc.status, exc.code, exc.message, exc.details)
