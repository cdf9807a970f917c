"""JSON envelopes shared by every route."""

from typing import Any, Dict, Optional

from flask import jsonify


def success(data: Any, message: str = "OK", code: int = 200):
    return jsonify({
        "success": True,
        "message": message,
        "data": data,
    }), code


def error(message: str, code: int = 400, details: Optional[Dict[str, Any]] = None):
    body: Dict[str, Any] = {
        "success": False,
        "error": {
            "code": code,
            "message": message,
        },
    }
    if details:
        body["error"]["details"] = details
    return jsonify(body), code
