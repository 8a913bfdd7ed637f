"""Query signatures: canonical query shapes and their cache."""

from gqlmetrics.instrumentation.signature.cache import QuerySignatureCache
from gqlmetrics.instrumentation.signature.models import QuerySignature, SignatureCacheKey
from gqlmetrics.instrumentation.signature.service import (
    QuerySignatureService,
    compute_signature,
    query_hash,
)

__all__ = [
    "QuerySignature",
    "QuerySignatureCache",
    "QuerySignatureService",
    "SignatureCacheKey",
    "compute_signature",
    "query_hash",
]
