"""Renderable components of the dashboard."""

from clusterscope.view.components.elasticsearch import ElasticsearchComponent
from clusterscope.view.components.help import HelpComponent
from clusterscope.view.components.resource_tab import ResourceTab

__all__ = ["ElasticsearchComponent", "HelpComponent", "ResourceTab"]
