"""Exception types shared by the catalog and folder pipelines."""

from __future__ import annotations


class CuratorError(Exception):
    """Base error for the project."""


class CatalogNotFoundError(CuratorError):
    """The catalog file given on input does not exist."""


class CatalogFormatError(CuratorError):
    """The catalog is not a JSON array of objects."""


class RootFolderError(CuratorError):
    """The thumbnail root folder is missing or not a directory."""


class MissingIdentifierError(ValueError):
    """A record has no usable identifying string."""
