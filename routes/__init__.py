from .health import health_bp
from .booking import booking_bp
from .templates import templates_bp
from .audit_logs import logs_bp
