"""
Endpoint subpackage for API v1.

Each module defines an APIRouter for one domain.  Handlers resolve the
caller, pass it explicitly to the service and translate ``None``/
``False`` results into HTTP errors.
"""
