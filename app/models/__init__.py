from app.models.asset import Asset
from app.models.task import Task
from app.models.template import Template

__all__ = [
    "Asset",
    "Task",
    "Template",
]
