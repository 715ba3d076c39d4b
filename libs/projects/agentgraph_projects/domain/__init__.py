from .models import Project

__all__ = ["Project"]
