"""
Task-request pipeline orchestration.

Stages, in dependency order:

    authenticate -> fetch -> resolve -> compose -> submit

``fetch`` issues the four independent reads (employees, code elements,
module metadata, equipments) and the optional image upload concurrently.
The first failure in any stage aborts the run; nothing is retried.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from config.config import ArxsConfig
from core.errors.exceptions import ConfigurationError
from core.logging.context_managers import LogContext, StageLogContext, log_phase
from core.utils.run_id import generate_run_id
from taskrequest.api_client import ArxsApiClient
from taskrequest.attachments import build_attachment
from taskrequest.auth import BearerToken, IdentityClient
from taskrequest.blob_upload import BlobUploader, require_file
from taskrequest.categories import resolve_category
from taskrequest.composer import compose_task_request, submit_task_request
from taskrequest.hierarchy import build_forest, count_nodes
from taskrequest.resolvers import (
    resolve_employee,
    resolve_equipment,
    resolve_kind,
    resolve_module_root,
    resolve_type,
)
from taskrequest.schemas.task_request import TaskRequestDefaults, TaskRequestInput

logger = logging.getLogger(__name__)


async def gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """
    Run awaitables concurrently and return their results in order.

    Unlike a bare ``asyncio.gather``, the first failure cancels the calls
    still in flight before it propagates.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def _no_upload() -> None:
    return None


class TaskRequestPipeline:
    """
    One task-request submission against the ARXS platform.

    The credential obtained in ``authenticate`` is handed to a fresh API
    client for this run only. ``identity_client`` and ``client_factory``
    default to the real implementations built from ``config``.
    """

    def __init__(
        self,
        config: ArxsConfig,
        identity_client: IdentityClient | None = None,
        client_factory: Callable[[BearerToken], ArxsApiClient] | None = None,
        run_id: str | None = None,
    ):
        self.config = config
        self.identity_client = identity_client or IdentityClient(
            identity_url=config.identity_url,
            api_key=config.api_key,
            tenant_id=config.tenant_id,
            timeout_seconds=config.timeout_seconds,
        )
        self.client_factory = client_factory or self._default_client
        try:
            self.defaults = TaskRequestDefaults.model_validate(config.defaults or {})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid arxs.defaults section: {e}", cause=e) from e
        self.run_id = run_id or generate_run_id("taskrequest")

    def _default_client(self, credential: BearerToken) -> ArxsApiClient:
        return ArxsApiClient(
            base_url=self.config.base_url,
            credential=credential,
            timeout_seconds=self.config.timeout_seconds,
        )

    async def run(self, request: TaskRequestInput, dry_run: bool = False) -> dict[str, Any]:
        """
        Execute the pipeline.

        Args:
            request: Lookup inputs for this run
            dry_run: Compose the task request but do not upload or submit it

        Returns:
            The server-assigned task request, or the composed body on dry run

        Raises:
            PipelineError: Subclass named after the failed stage
        """
        with LogContext(run_id=self.run_id, target_module=request.module):
            logger.info(
                "Task request run starting",
                extra={"dry_run": dry_run},
            )

            with StageLogContext(logger, "authenticate"):
                credential = await self.identity_client.get_token()

            async with self.client_factory(credential) as client:
                with StageLogContext(logger, "fetch") as stage:
                    employees, code_elements, metadata, equipments, blob_url = (
                        await self._fetch(client, request, dry_run)
                    )
                    stage.set_result(records=len(employees) + len(code_elements) + len(equipments))

                with StageLogContext(logger, "resolve") as stage:
                    notifier = resolve_employee(employees, request.user_name)

                    with log_phase(logger, "build_forest"):
                        forest = build_forest(code_elements)
                    category_code = resolve_category(metadata)
                    module_root = resolve_module_root(forest, category_code)
                    kind = resolve_kind(module_root, request.kind_name)
                    type_ = resolve_type(kind, request.type_name)

                    subject = resolve_equipment(equipments, request.subject_unique_number)
                    stage.set_result(
                        category_code=category_code,
                        root_count=len(forest),
                        node_count=count_nodes(forest),
                    )

                with StageLogContext(logger, "compose"):
                    if dry_run and request.image_path is not None:
                        blob_url = request.image_path.resolve().as_uri()
                    task_request = compose_task_request(
                        notifier,
                        kind,
                        type_,
                        subject,
                        attachment_info=build_attachment(blob_url),
                        defaults=self.defaults,
                    )

                if dry_run:
                    logger.info("Dry run: task request composed, not submitted")
                    return task_request.to_payload()

                with StageLogContext(logger, "submit"):
                    return await submit_task_request(client, task_request)

    async def _fetch(
        self,
        client: ArxsApiClient,
        request: TaskRequestInput,
        dry_run: bool,
    ) -> list[Any]:
        if request.image_path is None:
            upload = _no_upload()
        elif dry_run:
            # Same local check the upload does, without the network calls
            require_file(request.image_path)
            upload = _no_upload()
        else:
            uploader = BlobUploader(client, blob_api_version=self.config.blob_api_version)
            upload = uploader.upload(request.image_path)

        return await gather_or_cancel(
            client.get_employees(),
            client.get_code_elements(),
            client.get_module_metadata(request.module),
            client.get_equipments(),
            upload,
        )
