import asyncio
from collections.abc import Awaitable, Callable

from newsdesk.inference.base import BaseInferenceGateway
from newsdesk.inference.models import InferenceResult
from newsdesk.queue.models import Job

JobExecutor = Callable[[Job], Awaitable[InferenceResult]]


class GatewayExecutor:
    """Runs a job's remote call on a worker thread.

    The gateway is blocking; running it through asyncio.to_thread keeps the
    event loop (and the other category's queue) responsive. The gateway is
    looked up per call so a rebuilt gateway takes effect for the next job.
    """

    def __init__(self, gateway: Callable[[], BaseInferenceGateway]) -> None:
        self._gateway = gateway

    async def __call__(self, job: Job) -> InferenceResult:
        gateway = self._gateway()
        return await asyncio.to_thread(
            gateway.submit, job.category, job.payload, job.auxiliary_input
        )
