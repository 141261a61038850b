from .config import ConfigurationError, Endpoint, endpoint  # NOQA: F401
from .handler import ConnectionHandler, HandlerState  # NOQA: F401
from .http.model import (  # NOQA: F401
	HTTPRequestLine,
	HTTPResponse,
	HTTPRequestError,
	NotFound,
	ProtocolError,
)
from .http.parser import resolve, validate  # NOQA: F401
from .server import AIOSocketServer, ServerOptions, run  # NOQA: F401

__version__: str = "1.0.0"

# EOF
