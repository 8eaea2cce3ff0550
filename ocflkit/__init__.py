"""ocflkit: validation and manipulation of Oxford Common File Layout objects.

  - Versioned object model with append-only version blocks
  - Inventory codec (inventory.json plus digest sidecar)
  - Structure, checksum, fixity and inventory validation with stable codes
  - Delta engine classifying version changes as add/update/copy/move/delete
"""

__version__ = "0.1.0"
__description__ = "Validator and manipulation engine for OCFL objects"

from ocflkit.config import OcflConfig
from ocflkit.core.delta import OcflDelta
from ocflkit.core.inventory import OcflInventory
from ocflkit.core.ocfl_object import OcflObject, VersionedObject
from ocflkit.core.results import OcflResults
from ocflkit.core.validator import OcflValidator
from ocflkit.core.verify import OcflVerify

__all__ = [
    "OcflConfig",
    "OcflDelta",
    "OcflInventory",
    "OcflObject",
    "OcflResults",
    "OcflValidator",
    "OcflVerify",
    "VersionedObject",
    "__version__",
]
