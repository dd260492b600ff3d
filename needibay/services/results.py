"""Result dicts returned by every service call to the routes."""

from typing import Any, Dict, List


def success(message: str = '', **data: Any) -> Dict[str, Any]:
    return {'ok': True, 'message': message, **data}


def failure(error: str, **data: Any) -> Dict[str, Any]:
    return {'ok': False, 'error': error, 'errors': [error], **data}


def invalid(messages: List[str]) -> Dict[str, Any]:
    """Validation failure carrying every schema message."""
    return {'ok': False, 'error': '\n'.join(messages), 'errors': list(messages)}
