"""Link presence and image alt-text audits."""

from .images import ImageAuditor
from .links import audit_links, has_utm, strip_utm

__all__ = ["ImageAuditor", "audit_links", "has_utm", "strip_utm"]
