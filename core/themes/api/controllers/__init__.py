"""
Request controllers for the theme submission API.

Controllers accept deserialized request data and the authenticated user, and
return a tuple of ``(body, status, headers)``. Errors from the submission
core are translated to :mod:`werkzeug.exceptions` (see
:func:`.util.handle_errors`), which the application renders as JSON.
"""
