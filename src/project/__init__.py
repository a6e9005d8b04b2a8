"""Project descriptor loading."""

from project.descriptor import ProjectDescriptor, load_descriptor

__all__ = ["ProjectDescriptor", "load_descriptor"]
