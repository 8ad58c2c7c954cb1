"""Controllers for submission intake and review."""

import logging
from http import HTTPStatus as status
from typing import Any, Dict, Optional

from flask import url_for
from werkzeug.exceptions import BadRequest

from themes.submission import core, suggestions
from themes.submission.auth import require_admin, require_not_banned
from themes.submission.contributors import validate_contributors
from themes.submission.domain import User, Submission, CreateSubmission, \
    SubmissionRequest
from themes.submission.exceptions import AuthorizationError
from themes.submission.services.source import SourceService, FetchFailed, \
    NotStylesheet

from .util import Response, handle_errors, submission_to_json

logger = logging.getLogger(__name__)


@handle_errors
def create_submission(data: Any, user: User) -> Response:
    """
    Accept a new submission.

    Contributors are resolved again here, whatever the client says about
    them. If the payload has no content, the source is fetched from its
    ``sourceLink``.

    Parameters
    ----------
    data : dict
        Deserialized JSON payload (see :class:`.SubmissionRequest`).
    user : :class:`.User`
        The authenticated submitter.

    Returns
    -------
    dict
        Response data: the new submission, and the contributor ids that could
        not be credited.
    int
        HTTP status code.
    dict
        Headers to add to the response.

    """
    require_not_banned(user)
    request = SubmissionRequest.from_dict(data)
    batch = validate_contributors(request.contributors, user)
    if request.content:
        suggestions.decode_content(request.content)     # Must be base64.
        content = request.content
    else:
        content = _fetch_source(request.source_link)

    submission = core.create(CreateSubmission(
        creator=user,
        title=request.title,
        description=request.description,
        source_link=request.source_link,
        content=content,
        preview_image=request.preview_image,
        contributors=batch.contributors,
        validated_users=batch.validated_users
    ))
    headers = {'Location': url_for('api.get_submission',
                                   submission_id=submission.submission_id)}
    body = {'id': submission.submission_id,
            'submission': submission_to_json(submission),
            'failed': [{'id': f.user_id, 'reason': f.reason}
                       for f in batch.failures]}
    return body, status.CREATED, headers


@handle_errors
def get_submission(submission_id: int, user: User) -> Response:
    """Get a submission; only admins and the submitter may see it."""
    submission = core.load(submission_id)
    if not user.admin and not submission.is_submitter(user.user_id):
        raise AuthorizationError('You may not view this submission')
    return submission_to_json(submission), status.OK, {}


@handle_errors
def list_submissions(params: Dict[str, str], user: User) -> Response:
    """List submissions for review, optionally by state."""
    require_admin(user)
    state: Optional[str] = params.get('state') or None
    if state is not None and state not in Submission.STATES:
        raise BadRequest(f'Invalid state: {state}')
    submissions = core.load_submissions(state=state)
    return {'submissions': [submission_to_json(s) for s in submissions]}, \
        status.OK, {}


@handle_errors
def list_own_submissions(user: User) -> Response:
    """List the submissions of the authenticated user."""
    submissions = core.load_submissions(submitted_by=user.user_id)
    return {'submissions': [submission_to_json(s) for s in submissions]}, \
        status.OK, {}


@handle_errors
def get_suggestions(submission_id: int, user: User) -> Response:
    """Suggest tags for a submission, for review by an admin."""
    require_admin(user)
    submission = core.load(submission_id)
    return {'id': submission_id,
            'tags': suggestions.suggest_tags(submission)}, status.OK, {}


def _fetch_source(source_link: str) -> str:
    try:
        return SourceService.current_session().fetch(source_link)
    except NotStylesheet as e:
        raise BadRequest(str(e)) from e
    except FetchFailed as e:
        logger.info('Could not fetch source: %s', e)
        raise BadRequest(f'Could not fetch source from {source_link}') from e
