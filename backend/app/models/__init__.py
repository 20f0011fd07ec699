from app.models.admin import Admin  # noqa: F401
from app.models.driver import Driver  # noqa: F401
from app.models.hospital import Hospital  # noqa: F401
from app.models.pickup import Pickup, PickupPhoto, PickupStatus  # noqa: F401
