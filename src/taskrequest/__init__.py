"""
ARXS task-request pipeline.

Authenticates against the ARXS facility-management platform, resolves an
employee, a kind/type classification and an equipment (plus an optional
uploaded image), and submits a task request that references them.

Modules:
    api_client   - Async REST client (aiohttp) with stage-typed failures
    auth         - JWT acquisition and the immutable BearerToken credential
    hierarchy    - Flat code element list -> forest
    categories   - Which forest root belongs to a module
    resolvers    - Exact-match, first-result lookups
    attachments  - attachmentInfo for an uploaded image
    blob_upload  - Pre-authorized blob PUT
    composer     - TaskRequest assembly and submission
    runner       - Stage-by-stage orchestration
"""

from taskrequest.runner import TaskRequestPipeline

__all__ = ["TaskRequestPipeline"]
