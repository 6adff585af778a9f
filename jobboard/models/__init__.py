# __init__.py
from jobboard.models.application import Application
from jobboard.models.job import Job
from jobboard.models.user import User

__all__ = [
	"Application",
	"Job",
	"User",
]
