"""SQLAlchemy models for ViewingDesk.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from app.models.applicant import Applicant, ApplicantIdentityChange
from app.models.inquiry import Inquiry
from app.models.property import Property
from app.models.user import User
from app.models.viewing_slot import SlotStatus, ViewingSlot
from app.models.viewing_token import ViewingToken

__all__ = [
    "Applicant",
    "ApplicantIdentityChange",
    "Inquiry",
    "Property",
    "SlotStatus",
    "User",
    "ViewingSlot",
    "ViewingToken",
]
