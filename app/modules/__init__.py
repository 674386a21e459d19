"""Domain modules package."""

from app.modules.audit import models as audit_models  # noqa: F401
from app.modules.booking import models as booking_models  # noqa: F401
from app.modules.identity import models as identity_models  # noqa: F401
from app.modules.tuition_requests import models as tuition_requests_models  # noqa: F401
from app.modules.tutors import models as tutors_models  # noqa: F401
