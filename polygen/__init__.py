"""Polygen: compile one application specification into many platform targets."""

__version__ = "0.1.0"
