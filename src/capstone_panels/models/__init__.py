from .records import *  # noqa: F401,F403
from .records import __all__ as _records_all
from .results import *  # noqa: F401,F403
from .results import __all__ as _results_all

__all__ = list(_records_all) + list(_results_all)
