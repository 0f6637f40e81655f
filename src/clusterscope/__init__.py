"""clusterscope - terminal dashboard for browsing Elasticsearch clusters."""

__version__ = "0.1.0"
