"""
Multi-step submission wizard.

The wizard collects a submission over four steps, validating each step
before moving on, and submits it through a :class:`.PortalClient` when the
last step is completed. Moving back never loses what has been entered.
"""

import base64
import logging
from typing import Callable, Dict, List, Optional

from themes.submission.contributors import parse_bulk
from themes.submission.domain.user import User, ValidatedUser
from themes.submission.exceptions import AuthorizationError, \
    ValidationError

from .api import PortalClient, RequestFailed

logger = logging.getLogger(__name__)

TITLE = 1
DESCRIPTION = 2
PREVIEW_IMAGE = 3
ATTRIBUTION = 4
STEPS = (TITLE, DESCRIPTION, PREVIEW_IMAGE, ATTRIBUTION)

IMAGE_EXTENSIONS = ('.png', '.gif', '.webp', '.jpg', '.jpeg')

TITLE_TOO_SHORT = 'Title must be longer than 3 characters.'
DESCRIPTION_REQUIRED = 'Description is required.'
IMAGE_REQUIRED = 'Preview image is required.'
SOURCE_REQUIRED = 'Source link is required.'
IMAGE_URL_INVALID = 'Image URL must end in .png, .gif, .webp, .jpg or .jpeg.'
PREVIEW_FAILED = 'Failed to generate preview. Please try again.'
SUBMIT_FAILED = ('An error occurred while submitting your theme.'
                 ' Please try again later.')

Screenshot = Callable[[str], bytes]
"""Renders the page at a URL, returning PNG bytes."""


class WizardDisabled(AuthorizationError):
    """The user is banned from making submissions."""


def to_data_url(raw: bytes, mime: str) -> str:
    """Encode an uploaded image as a ``data:`` URL."""
    return f'data:{mime};base64,{base64.b64encode(raw).decode("ascii")}'


class SubmissionWizard(object):
    """
    Collects and submits one theme on behalf of a user.

    Parameters
    ----------
    client : :class:`.PortalClient`
        Authenticated as ``user``.
    user : :class:`.User`
        The submitter.
    screenshot : callable
        Used by :meth:`generate_preview`.

    Raises
    ------
    :class:`WizardDisabled`
        Raised if ``user`` is banned from making submissions.

    """

    def __init__(self, client: PortalClient, user: User,
                 screenshot: Optional[Screenshot] = None) -> None:
        if user.banned_from_submissions:
            raise WizardDisabled(user.ban_reason or 'User is banned')
        self.client = client
        self.user = user
        self.screenshot = screenshot
        self.current_step = TITLE

        self.title = ''
        self.description = ''
        self.preview_image = ''
        self.source_link = ''
        self.contributors: List[str] = []
        self.validated_users: Dict[str, ValidatedUser] = {}

        self.errors: Dict[str, str] = {}
        self.contributor_failures: List[dict] = []
        self.submit_error: Optional[str] = None
        self.generating_preview = False
        self.submitting = False
        self.submission_id: Optional[int] = None

    @property
    def retryable(self) -> bool:
        """Whether the last submit attempt failed in a way worth retrying."""
        return self.submit_error is not None and not self.submitting

    def validate_step(self, step: int) -> Dict[str, str]:
        """Get the validation errors, by field, of a step."""
        errors = {}
        if step == TITLE and len(self.title.strip()) < 3:
            errors['title'] = TITLE_TOO_SHORT
        if step == DESCRIPTION and not self.description.strip():
            errors['description'] = DESCRIPTION_REQUIRED
        if step == PREVIEW_IMAGE and not self.preview_image:
            errors['file'] = IMAGE_REQUIRED
        if step == ATTRIBUTION and not self.source_link.strip():
            errors['sourceLink'] = SOURCE_REQUIRED
        return errors

    def next(self) -> bool:
        """
        Complete the current step.

        On the last step, this submits the theme.

        Returns
        -------
        bool
            ``True`` if the wizard moved on (or the submission was
            accepted), ``False`` if it stays on the current step.

        """
        if self.current_step == PREVIEW_IMAGE and 'file' in self.errors:
            return False        # A rejected image blocks this step.
        errors = self.validate_step(self.current_step)
        if errors:
            self.errors = errors
            return False
        self.errors = {}
        if self.current_step == ATTRIBUTION:
            return self.submit()
        self.current_step += 1
        return True

    def back(self) -> None:
        """Go back one step, keeping everything entered so far."""
        if self.current_step > TITLE and not self.submitting:
            self.current_step -= 1
            self.errors = {}

    # Preview image.

    def upload_image(self, raw: bytes, mime: str) -> None:
        self.preview_image = to_data_url(raw, mime)
        self.errors.pop('file', None)

    def set_image_url(self, url: str) -> bool:
        """Use an image on the web as preview; rejects non-image URLs."""
        url = (url or '').strip()
        if not url.lower().endswith(IMAGE_EXTENSIONS):
            self.errors['file'] = IMAGE_URL_INVALID
            return False
        self.preview_image = url
        self.errors.pop('file', None)
        return True

    def generate_preview(self, url: str) -> bool:
        """Take a screenshot of a page, and use it as preview."""
        if self.screenshot is None:
            raise RuntimeError('No screenshot service configured')
        if self.generating_preview:
            return False
        self.generating_preview = True
        try:
            raw = self.screenshot(url)
        except Exception as e:
            logger.error('Failed to generate preview of %s: %s', url, e)
            self.errors['file'] = PREVIEW_FAILED
            return False
        finally:
            self.generating_preview = False
        self.upload_image(raw, 'image/png')
        return True

    # Attribution.

    def add_contributors(self, text: str) -> List[dict]:
        """
        Credit the users whose ids are in ``text``.

        Returns
        -------
        list
            ``{id, reason}`` for each id that could not be credited.

        """
        raw_ids = [uid for uid in parse_bulk(text)
                   if uid not in self.contributors]
        if not raw_ids:
            return []
        try:
            result = self.client.validate_users(raw_ids)
        except (RequestFailed, ValidationError) as e:
            logger.error('Could not validate contributors: %s', e)
            self.contributor_failures = [{'id': uid, 'reason': 'unavailable'}
                                         for uid in raw_ids]
            return self.contributor_failures
        for uid in result['contributors']:
            if uid == self.user.user_id or uid in self.contributors:
                continue
            profile = result['validatedUsers'].get(uid, {})
            self.contributors.append(uid)
            self.validated_users[uid] = ValidatedUser(id=uid, **profile)
        self.contributor_failures = list(result['failed'])
        return self.contributor_failures

    def remove_contributor(self, user_id: str) -> None:
        if user_id in self.contributors:
            self.contributors.remove(user_id)
        self.validated_users.pop(user_id, None)

    # Submission.

    def submit(self) -> bool:
        """Submit the theme, unless a submission is already under way."""
        if self.submitting or self.submission_id is not None:
            return False
        for step in STEPS:
            errors = self.validate_step(step)
            if errors:
                self.errors = errors
                self.current_step = step
                return False
        self.submitting = True
        self.submit_error = None
        try:
            response = self.client.submit(
                title=self.title.strip(),
                description=self.description.strip(),
                source_link=self.source_link.strip(),
                preview_image=self.preview_image,
                contributors=self.contributors
            )
        except AuthorizationError as e:
            self.submit_error = str(e) or SUBMIT_FAILED
            raise WizardDisabled(self.submit_error) from e
        except (RequestFailed, ValidationError) as e:
            logger.error('Failed to submit: %s', e)
            self.submit_error = str(e) or SUBMIT_FAILED
            return False
        finally:
            self.submitting = False
        self.submission_id = response['id']
        logger.info('Submitted theme %s', self.submission_id)
        return True
