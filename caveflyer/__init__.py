"""Procedurally generated cave-flying environment for reinforcement learning."""

__version__ = "1.0.0"