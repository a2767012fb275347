# (c) Copyright Datacraft, 2026
"""Activity enumerations."""
from enum import Enum


class ActivityType(str, Enum):
	AUTHENTICATION = "authentication"
	AUTHORIZATION = "authorization"
	POLICY_MANAGEMENT = "policy_management"
	USER_MANAGEMENT = "user_management"
	RESOURCE_MANAGEMENT = "resource_management"
	SYSTEM_CONFIGURATION = "system_configuration"
	AUDIT = "audit"
	SECURITY_EVENT = "security_event"
	DATA_MODIFICATION = "data_modification"
	ACCESS_REQUEST = "access_request"
	WORKFLOW = "workflow"
	INTEGRATION = "integration"
	MAINTENANCE = "maintenance"


class ActivityCategory(str, Enum):
	SECURITY = "security"
	ADMINISTRATION = "administration"
	COMPLIANCE = "compliance"
	OPERATION = "operation"
	CONFIGURATION = "configuration"
	INTEGRATION = "integration"
	MONITORING = "monitoring"
	USER_ACTIVITY = "user_activity"


class Severity(str, Enum):
	LOW = "low"
	MEDIUM = "medium"
	HIGH = "high"
	CRITICAL = "critical"


class ActorType(str, Enum):
	USER = "user"
	SYSTEM = "system"
	SERVICE = "service"


class ExportFormat(str, Enum):
	CSV = "csv"
	JSON = "json"
