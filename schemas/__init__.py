# Schemas package for FastAPI validation
from .api_models import *
