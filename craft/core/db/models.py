# (c) Copyright Datacraft, 2026
"""Re-export every ORM model so the metadata knows all tables."""
from craft.core.features.actions.db.orm import Action
from craft.core.features.activities.db.orm import Activity
from craft.core.features.additional_resources.db.orm import AdditionalResource
from craft.core.features.attributes.db.orm import Attribute
from craft.core.features.hierarchy.db.orm import Application, Environment, Workspace
from craft.core.features.policies.db.orm import PolicyModel
from craft.core.features.resources.db.orm import Resource
from craft.core.features.subjects.db.orm import Subject
from craft.core.features.users.db.orm import User

__all__ = [
	"Action",
	"Activity",
	"AdditionalResource",
	"Attribute",
	"Application",
	"Environment",
	"PolicyModel",
	"Resource",
	"Subject",
	"User",
	"Workspace",
]
