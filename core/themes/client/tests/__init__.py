"""Tests for :mod:`themes.client`."""
