"""Files plugin that tags records with the adapter that renders them."""

from collections.abc import Mapping
from typing import Any

from partsmith.core.plugin_pipeline import Plugin
from partsmith.infra.logging import get_logger
from partsmith.schemas.adapter import Adapter

logger = get_logger(__name__)


def adapter_tag_plugin(adapter: Adapter) -> Plugin:
    """Build a files plugin for ``adapter``.

    Every mapping record handled by the adapter is replaced by a copy with
    ``adapter`` set to the adapter name. Other records pass through. A
    single record payload is tagged and returned as a single record.
    """

    def tag(record: Any) -> Any:
        if isinstance(record, Mapping) and adapter.handles(record):
            return {**record, "adapter": adapter.name}
        return record

    def plugin(files: Any, engine: Any = None) -> Any:
        if files is None:
            return files
        if isinstance(files, Mapping):
            return tag(files)

        records = list(files)
        tagged = [tag(record) for record in records]
        logger.debug(
            "Files tagged for adapter",
            adapter=adapter.name,
            tagged=sum(1 for new, old in zip(tagged, records) if new is not old),
        )
        return tagged

    plugin.__qualname__ = f"adapter_tag[{adapter.name}]"
    return plugin
