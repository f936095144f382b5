"""Pytest fixtures for piemme tests."""

from tests.fixtures.fakes import *
