"""project-manager: a personal registry of development project directories."""

__version__ = "0.1.1"
