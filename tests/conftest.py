"""Register the shared fixtures for every test module."""

from tests.fixtures import *  # noqa: F401,F403
