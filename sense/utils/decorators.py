"""
Identity Decorators

Contains the decorator that resolves the device user identifier for HTTP endpoints.
"""

import re
from functools import wraps
from flask import request, jsonify, make_response

from .helpers import USER_ID_HEADER, get_user_identity

_USER_ID_PATTERN = re.compile(r'^[A-Za-z0-9_\-]{1,128}$')


def require_user(f):
    """
    Decorator resolving the caller's device identifier onto ``request.user_id``.

    A missing header gets a freshly generated id (``request.user_id_created``
    is set and the id is echoed in the response header); a malformed one
    is rejected.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        identity = get_user_identity(request)

        if not _USER_ID_PATTERN.match(identity['user_id']):
            return jsonify({
                'success': False,
                'error': 'Invalid user identifier'
            }), 400

        request.user_id = identity['user_id']
        request.user_id_created = identity['created']

        response = make_response(f(*args, **kwargs))
        if request.user_id_created:
            response.headers[USER_ID_HEADER] = request.user_id
        return response

    return decorated_function
