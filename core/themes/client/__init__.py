"""Client-side workflows for the theme portal: submission and inbox."""

from .api import PortalClient, RequestFailed
from .inbox import NotificationCache, NotificationInbox
from .wizard import SubmissionWizard, WizardDisabled
