from merkledag.models import *  # noqa: F401,F403
from merkledag.models import __all__  # noqa: F401

__version__ = "0.1.0"
