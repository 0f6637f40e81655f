"""
API layer between the transport controller and the backend clients.

- types: request/response tagged unions, envelopes, typed failures
- elasticsearch: ElasticsearchApiHandler routing requests to cluster clients
- dispatcher: ApiDispatcher spawning one task per request
"""

from clusterscope.api.dispatcher import ApiDispatcher, classify_error
from clusterscope.api.elasticsearch import ApiHandleError, ElasticsearchApiHandler
from clusterscope.api.types import (
    AliasesResponse,
    ApiFailure,
    ClusterHealthResponse,
    FailureKind,
    FetchAliases,
    FetchCluster,
    FetchIndex,
    FetchIndices,
    IndexResponse,
    IndicesResponse,
    RequestEnvelope,
    RequestEvent,
    RequestId,
    ResponseEnvelope,
    ResponseEvent,
    describe_request,
)

__all__ = [
    "AliasesResponse",
    "ApiDispatcher",
    "ApiFailure",
    "ApiHandleError",
    "ClusterHealthResponse",
    "ElasticsearchApiHandler",
    "FailureKind",
    "FetchAliases",
    "FetchCluster",
    "FetchIndex",
    "FetchIndices",
    "IndexResponse",
    "IndicesResponse",
    "RequestEnvelope",
    "RequestEvent",
    "RequestId",
    "ResponseEnvelope",
    "ResponseEvent",
    "classify_error",
    "describe_request",
]
