"""Core data structures for the submission and moderation system."""

from .user import User, Moderator, ValidatedUser, Standing
from .submission import Submission
from .notification import Notification, NotificationType
from .outbox import Intent, Notify, Ban, intent_factory
from .event import Event, CreateSubmission, ApproveSubmission, \
    RejectSubmission
from .request import SubmissionRequest, ApproveRequest, RejectRequest, \
    BanRequest, UnbanRequest, AnnouncementRequest, ValidateUsersRequest, \
    standing_request
