"""Type-prefixed, time-sortable identifiers (TypeIDs).

    >>> from typeids import TypeID
    >>> tid = TypeID.from_string("prefix_01h455vb4pex5vsknk084sn02q")
    >>> tid.prefix
    'prefix'
    >>> tid.to_uuid()
    '01890a5d-ac96-774b-bcce-b302099a8057'
"""

from .core import *  # noqa: F401,F403
from .core import __all__
