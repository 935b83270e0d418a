from .base import Base
from .user_plate import UserPlate
from .charger_usage import ChargerUsage
from .alert import Alert
from .unregistered_plate import UnregisteredPlate
from .failed_detection import FailedDetection
from .subscription import Subscription

__all__ = ["Base", "UserPlate", "ChargerUsage", "Alert", "UnregisteredPlate", "FailedDetection", "Subscription"]
