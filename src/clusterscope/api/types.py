"""
Request, response and envelope types exchanged with the API dispatcher.

Requests and responses are closed tagged unions: each backend contributes a
fixed set of frozen dataclasses, and the top-level RequestEvent /
ResponseEvent aliases name the union of every backend's variants. Routing
is done with isinstance checks against these sets, never by looking up
handlers dynamically.

Envelopes pair a value with the RequestId assigned by the transport
controller. They only exist on the channels between the controller and the
dispatcher.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from clusterscope.client.types import CatAliases, CatIndices, ClusterHealth, Index

RequestId = int
"""Correlation identifier, allocated by the transport controller."""


# =============================================================================
# Elasticsearch requests
# =============================================================================


@dataclass(frozen=True)
class FetchCluster:
    """Fetch cluster health."""

    cluster_name: str


@dataclass(frozen=True)
class FetchIndices:
    """Fetch the index catalog."""

    cluster_name: str


@dataclass(frozen=True)
class FetchAliases:
    """Fetch the alias catalog."""

    cluster_name: str


@dataclass(frozen=True)
class FetchIndex:
    """Fetch the detail of one index."""

    cluster_name: str
    index: str


ElasticsearchRequest = Union[FetchCluster, FetchIndices, FetchAliases, FetchIndex]
ELASTICSEARCH_REQUESTS = (FetchCluster, FetchIndices, FetchAliases, FetchIndex)


# =============================================================================
# Elasticsearch responses
# =============================================================================


@dataclass(frozen=True)
class ClusterHealthResponse:
    cluster_name: str
    response: ClusterHealth


@dataclass(frozen=True)
class IndicesResponse:
    cluster_name: str
    response: CatIndices


@dataclass(frozen=True)
class AliasesResponse:
    cluster_name: str
    response: CatAliases


@dataclass(frozen=True)
class IndexResponse:
    cluster_name: str
    index: str
    response: Index


ElasticsearchResponse = Union[
    ClusterHealthResponse, IndicesResponse, AliasesResponse, IndexResponse
]
ELASTICSEARCH_RESPONSES = (
    ClusterHealthResponse,
    IndicesResponse,
    AliasesResponse,
    IndexResponse,
)


# Only one backend exists today; a new one adds its variants here.
RequestEvent = ElasticsearchRequest
ResponseEvent = ElasticsearchResponse


# =============================================================================
# Failures and envelopes
# =============================================================================


class FailureKind(Enum):
    """Category of a failed backend call."""

    UNREACHABLE = "unreachable"
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"
    UNKNOWN_CLUSTER = "unknown_cluster"
    HTTP_ERROR = "http_error"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ApiFailure:
    """
    Typed failure of one backend call.

    Attributes:
        kind: Failure category
        message: Human-readable summary for the status bar and history
    """

    kind: FailureKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class RequestEnvelope:
    request_id: RequestId
    event: RequestEvent


@dataclass(frozen=True)
class ResponseEnvelope:
    """
    Outcome of one request, tagged with its RequestId.

    Attributes:
        request_id: Id of the request this answers
        result: Response on success, ApiFailure otherwise
    """

    request_id: RequestId
    result: Union[ResponseEvent, ApiFailure]

    @property
    def ok(self) -> bool:
        return not isinstance(self.result, ApiFailure)


def describe_request(request: RequestEvent) -> str:
    """Short label for a request, e.g. "indices b" or "index b/logs"."""
    if isinstance(request, FetchCluster):
        return f"cluster health {request.cluster_name}"
    if isinstance(request, FetchIndices):
        return f"indices {request.cluster_name}"
    if isinstance(request, FetchAliases):
        return f"aliases {request.cluster_name}"
    if isinstance(request, FetchIndex):
        return f"index {request.cluster_name}/{request.index}"
    return repr(request)
