from __future__ import annotations

import logging

from imagesec.core.config import settings
from imagesec.core.util import run_cmd
from imagesec.domain.models import ImageCheck, StatusReport

logger = logging.getLogger(__name__)


class StatusService:
    """Is each published image pullable, and does the PlatformIO entrypoint answer?"""

    @staticmethod
    def _pull(image: str) -> bool:
        ok = run_cmd(["docker", "pull", image], timeout_sec=settings.TOOL_TIMEOUT).ok
        if not ok:
            logger.warning("Image not available: %s", image)
        return ok

    @staticmethod
    def _service_test(image: str) -> tuple[bool, str | None]:
        r = run_cmd(["docker", "run", "--rm", image, "--version"], timeout_sec=60)
        if not r.ok:
            return False, None
        first = (r.stdout or "").strip().splitlines()
        return True, first[0] if first else None

    def check(self) -> StatusReport:
        builder = ImageCheck(image=settings.builder_image, pullable=self._pull(settings.builder_image))
        dev = ImageCheck(image=settings.dev_image, pullable=self._pull(settings.dev_image))

        service_ok: bool | None = None
        tested = builder if builder.pullable else dev if dev.pullable else None
        if tested is not None:
            service_ok, tested.version = self._service_test(tested.image)
            tested.runs = service_ok

        if builder.pullable and dev.pullable:
            verdict = "READY" if service_ok else "AVAILABLE"
        elif builder.pullable or dev.pullable:
            verdict = "PARTIAL"
        else:
            verdict = "NOT_READY"

        return StatusReport(builder=builder, dev=dev, service_ok=service_ok, verdict=verdict)
