# Import every model so Base.metadata and relationship() strings resolve
from app.db.session import Base  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.apartment import Apartment  # noqa: F401
from app.models.booking import Booking  # noqa: F401
from app.models.payment import Payment  # noqa: F401
from app.models.document import Document  # noqa: F401
from app.models.notification import AdminNotification  # noqa: F401
from app.models.offer import Offer  # noqa: F401
