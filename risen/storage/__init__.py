from .defaults import DEFAULT_TEMPLATES
from .pagination import Page, clamp_pagination
from .template_store import TemplateStore

__all__ = ["DEFAULT_TEMPLATES", "Page", "TemplateStore", "clamp_pagination"]
