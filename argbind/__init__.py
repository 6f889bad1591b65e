__title__ = 'argbind'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .bindings import *
from .schema import *
from .binder import *
from .environ import *
from .faults import *

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
    "__title__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the bindings
__all__ += bindings.__all__  # type: ignore[attr-defined]
# Load the exposed API of the schema
__all__ += schema.__all__  # type: ignore[attr-defined]
# Load the exposed API of the binder
__all__ += binder.__all__  # type: ignore[attr-defined]
# Load the exposed API of the environ
__all__ += environ.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
