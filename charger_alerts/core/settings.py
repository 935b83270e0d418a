from enum import Enum


class RunOutcome(str, Enum):
    SKIPPED = "skipped"
    NO_PLATE = "no_plate"
    ALERTED = "alerted"
    UNREGISTERED = "unregistered"
    FAILED = "failed"


class AlertStatus(str, Enum):
    SENT = "sent"


class SubscriptionAction(str, Enum):
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"


# Broadcast topic shared by every subscribed client
CHARGER_ALERTS_TOPIC = "charger_alerts"
NOTIFICATION_METHOD = "topic"
ALERT_MESSAGE_TYPE = "charger_alert"
CLICK_ACTION = "FLUTTER_NOTIFICATION_CLICK"

# Audit collections
ALERTS_COLLECTION = "alerts"
UNREGISTERED_PLATES_COLLECTION = "unregistered_plates"
FAILED_DETECTIONS_COLLECTION = "failed_detections"

# Defaults for optional report fields
UNKNOWN_CHARGER = "unknown"
UNKNOWN_LOCATION = "Unknown"
ANONYMOUS_REPORTER = "anonymous"

# RabbitMQ wiring
USAGE_EXCHANGE = "charger.usage.direct"
USAGE_QUEUE = "charger.usage.alerts"
USAGE_CREATED_ROUTING_KEY = "usage_report.created"

GCS_SCHEME = "gs://"
