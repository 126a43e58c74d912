from flask import request

from ..errors import PipelineError


def query_limit(default):
    """``?limit=`` as a positive int; absent or unparsable falls back to ``default``."""
    limit = request.args.get('limit', default=default, type=int)
    if limit < 1:
        raise PipelineError('limit must be a positive integer', limit=limit)
    return limit
