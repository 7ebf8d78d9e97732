from __future__ import annotations


class WebgenError(Exception):
    pass


class TemplateNotFoundError(WebgenError):
    pass


class MetadataError(WebgenError):
    pass


class PostsError(WebgenError):
    pass
