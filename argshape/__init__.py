__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'argshape'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .kinds import *
from .arguments import *
from .patterns import *
from .binding import *
from .resolution import *
from .commands import *
from .faults import *
from .utils import Unset

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__license__",
    "__version__",
    "version_info",
    "Unset",
)

# Load the exposed API of the kinds
__all__ += kinds.__all__  # type: ignore[attr-defined]
# Load the exposed API of the arguments
__all__ += arguments.__all__  # type: ignore[attr-defined]
# Load the exposed API of the patterns
__all__ += patterns.__all__  # type: ignore[attr-defined]
# Load the exposed API of the binding
__all__ += binding.__all__  # type: ignore[attr-defined]
# Load the exposed API of the resolution
__all__ += resolution.__all__  # type: ignore[attr-defined]
# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
