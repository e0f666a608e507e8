"""Inbound policy file watcher.

Polls an inbound directory, sends every new or modified file through
the extraction pipeline and writes the JSON to the outbound directory
as ``{stem}-ai.txt``. Each file version (name + modification time) is
processed once; a failed file is retried only after it changes.

Run standalone with ``policy-gateway-watch`` or
``python -m policy_gateway.watcher``.
"""

import asyncio
import json
import logging
from contextlib import suppress
from pathlib import Path

from policy_gateway.config import configure_logging, get_settings
from policy_gateway.entities import Success
from policy_gateway.services import ExtractionGateway

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = "-ai.txt"


class PolicyFileWatcher:
    """Polling watcher that feeds inbound files to an ExtractionGateway."""

    def __init__(
        self,
        gateway: ExtractionGateway,
        inbound_dir: str | Path,
        outbound_dir: str | Path,
        poll_interval: float = 5.0,
        pattern: str = "*",
    ) -> None:
        self._gateway = gateway
        self._inbound = Path(inbound_dir)
        self._outbound = Path(outbound_dir)
        self._poll_interval = poll_interval
        self._pattern = pattern
        self._seen: dict[str, int] = {}
        self._task: asyncio.Task | None = None

    def pending_files(self) -> list[Path]:
        """Files that are new or changed since they were last processed."""
        if not self._inbound.is_dir():
            return []
        pending = []
        for path in sorted(self._inbound.glob(self._pattern)):
            if not path.is_file() or path.name.startswith("."):
                continue
            if self._seen.get(path.name) != path.stat().st_mtime_ns:
                pending.append(path)
        return pending

    def output_path(self, source: Path) -> Path:
        return self._outbound / f"{source.stem}{OUTPUT_SUFFIX}"

    async def process_file(self, path: Path) -> bool:
        """Transform one file and write its output.

        Returns:
            True if an output file was written
        """
        self._seen[path.name] = path.stat().st_mtime_ns
        try:
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Cannot read inbound file %s: %s", path, e)
            return False

        if not content.strip():
            logger.warning("Skipping empty inbound file %s", path)
            return False

        result = await self._gateway.transform_content(content)
        if not isinstance(result, Success):
            logger.error("Transformation failed for %s (%s): %s", path.name, result.kind, result.message)
            return False

        target = self.output_path(path)
        text = json.dumps(result.value, indent=2, ensure_ascii=False)
        await asyncio.to_thread(self._write, target, text)
        logger.info("Wrote %s", target)
        return True

    @staticmethod
    def _write(target: Path, text: str) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(target.name + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(target)

    async def poll_once(self) -> int:
        """Process every pending file once.

        Returns:
            Number of output files written
        """
        written = 0
        for path in self.pending_files():
            if await self.process_file(path):
                written += 1
        return written

    async def run_forever(self) -> None:
        logger.info("Watching %s (every %ss)", self._inbound, self._poll_interval)
        while True:
            try:
                await self.poll_once()
            except OSError as e:
                logger.error("Polling %s failed: %s", self._inbound, e)
            await asyncio.sleep(self._poll_interval)

    def start(self) -> None:
        """Start polling in the background on the running event loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None


async def _watch() -> None:
    # api.dependencies imports this module
    from policy_gateway.api.dependencies import build_unstructured_gateway

    settings = get_settings()
    gateway = build_unstructured_gateway(settings)
    watcher = PolicyFileWatcher(
        gateway=gateway,
        inbound_dir=settings.inbound_dir,
        outbound_dir=settings.outbound_dir,
        poll_interval=settings.watcher_poll_interval,
    )
    try:
        await watcher.run_forever()
    finally:
        close = getattr(gateway.transformer, "close", None)
        if close is not None:
            await close()


def main() -> None:
    configure_logging()
    with suppress(KeyboardInterrupt):
        asyncio.run(_watch())


if __name__ == "__main__":
    main()
