__version__ = "1.0.0"
__author__ = "Andrew Hernandez"
__email__ = "andromedeyz@hotmail.com"
__license__ = "MIT"
__description__ = "Async FTP metadata client: symbolic link dereferencing, file sizes and modification times over one control connection."
__url__ = "http://github.com/ApaxPhoenix/FtpMeta"

# The factory - one configuration, as many connections as you like
from .ftp import FtpMeta

# The connection itself and the metadata session it hands out
from .core import FtpClient, Capabilities
from .session import Session, Blocking
from .guard import Guard

# What the operations take and return
from .models import (
    Entry,  # One item of a directory listing
    Kind,  # File, directory or link
    Reply,  # A parsed server reply
    SizeReply,  # Size plus the reply it came from
    Feature,  # Features a server can advertise
    TransferType,  # ASCII or binary
    UNKNOWN,  # Size sentinel
    MINIMUM,  # Timestamp sentinel
)

# Fine-tune how connections and sessions behave
from .config import (
    Limits,  # How deep link chains may go
    Timeout,  # How long to wait on the transport
    Zones,  # Server and local time zones
)

# Ways to log in
from .auth import (
    Basic,  # Username and password
    Guest,  # Anonymous access
)

# Keep your connections secure
from .settings import (
    SSL,  # FTPS context configuration
)

__all__ = [
    "FtpMeta",
    "FtpClient",
    "Capabilities",
    "Session",
    "Blocking",
    "Guard",
    "Entry",
    "Kind",
    "Reply",
    "SizeReply",
    "Feature",
    "TransferType",
    "UNKNOWN",
    "MINIMUM",
    "Limits",
    "Timeout",
    "Zones",
    "Basic",
    "Guest",
    "SSL",
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    "__description__",
    "__url__",
]
