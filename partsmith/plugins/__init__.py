"""Built-in plugins."""

from partsmith.plugins.adapter_tag import adapter_tag_plugin

__all__ = ["adapter_tag_plugin"]
