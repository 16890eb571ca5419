"""Inkwell — multi-user blogging API."""
