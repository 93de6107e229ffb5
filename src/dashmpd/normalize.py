#!/usr/bin/python3

import asyncio
import pathlib
import sys
import urllib.parse

import httpx
import msgspec

from .errors import MPDError
from .models import messages as messages
from .models.mpd import MPD
from .output import BaseMessageHandler


def _is_url(source: str) -> bool:
    return urllib.parse.urlsplit(source).scheme in ("http", "https")


def _output_name(source: str) -> str:
    if _is_url(source):
        *_, name = urllib.parse.urlsplit(source).path.rsplit("/", 1)
        return name or "manifest.mpd"
    return pathlib.Path(source).name


async def _load(client: httpx.AsyncClient, source: str) -> bytes:
    if _is_url(source):
        r = await client.get(source)
        r.raise_for_status()
        return r.content
    return pathlib.Path(source).read_bytes()


def summarize(source: str, manifest: MPD) -> messages.ManifestDecodedMessage:
    adaptation_sets = [a for p in manifest.periods for a in p.adaptation_sets]
    duration = manifest.media_presentation_duration
    return messages.ManifestDecodedMessage(
        source=source,
        manifest_type=manifest.type,
        num_periods=len(manifest.periods),
        num_adaptation_sets=len(adaptation_sets),
        num_representations=sum(len(a.representations) for a in adaptation_sets),
        media_presentation_duration=str(duration) if duration is not None else None,
    )


async def _run(job: "NormalizeJob") -> bool:
    succeeded: list[str] = []
    failed: list[str] = []

    async with httpx.AsyncClient(follow_redirects=True, timeout=job.timeout) as client:
        for source in job.sources:
            try:
                data = await _load(client, source)
                await job.emit(messages.ManifestLoadedMessage(source, len(data)))

                manifest = MPD.decode(data)
                await job.emit(summarize(source, manifest))

                destination = job.write(source, manifest.encode())
                await job.emit(messages.ManifestWrittenMessage(source, destination))
            except MPDError as exc:
                await job.emit(
                    messages.ManifestFailedMessage(source, exc.user_message, exc.internal())
                )
            except httpx.HTTPError as exc:
                await job.emit(messages.ManifestFailedMessage(source, "request failed", str(exc)))
            except OSError as exc:
                await job.emit(
                    messages.ManifestFailedMessage(source, "could not read or write file", str(exc))
                )
            else:
                succeeded.append(source)
                continue
            failed.append(source)

    await job.emit(messages.NormalizeJobFinishedMessage(succeeded, failed))
    return not failed


class NormalizeJob(msgspec.Struct, kw_only=True):
    """
    Decodes each source manifest and writes it back out in normalized form.

    Sources are file paths or http(s) URLs.  Manifests are written to output_directory
    under their original file name, or to standard output if no directory is set.
    """

    sources: list[str]
    output_directory: pathlib.Path | None = None
    timeout: float = 30.0
    handlers: list[BaseMessageHandler] = msgspec.field(default_factory=list)

    async def emit(self, msg: messages.BaseMessage) -> None:
        for handler in self.handlers:
            await handler.handle_message(msg)

    def write(self, source: str, text: str) -> pathlib.Path | None:
        if not self.output_directory:
            sys.stdout.write(text)
            sys.stdout.flush()
            return None
        self.output_directory.mkdir(parents=True, exist_ok=True)
        destination = self.output_directory / _output_name(source)
        destination.write_text(text, encoding="utf8")
        return destination

    async def async_run(self) -> bool:
        return await _run(self)

    def run(self) -> bool:
        # returns True if every source was normalized
        return asyncio.run(_run(self))
