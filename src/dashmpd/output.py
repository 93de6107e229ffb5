#!/usr/bin/python3

import sys

import colorama
import msgspec

from .models import messages as msgtypes


class BaseMessageHandler(msgspec.Struct):
    async def handle_message(self, msg: msgtypes.BaseMessage) -> None:
        raise NotImplementedError()


class JSONLMessageHandler(BaseMessageHandler, tag="jsonl"):
    # outputs messages as newline-delimited JSON
    # standard output is reserved for manifests, so this goes to standard error
    async def handle_message(self, msg: msgtypes.BaseMessage) -> None:
        print(msgspec.json.encode(msg).decode("utf8"), file=sys.stderr)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


class TextMessageHandler(BaseMessageHandler, tag="text"):
    # outputs human-readable status lines
    async def handle_message(self, msg: msgtypes.BaseMessage) -> None:
        match msg:
            case msgtypes.ManifestDecodedMessage():
                summary = ", ".join(
                    (
                        f"{msg.manifest_type or 'static'} manifest",
                        _plural(msg.num_periods, "period"),
                        _plural(msg.num_adaptation_sets, "adaptation set"),
                        _plural(msg.num_representations, "representation"),
                    )
                )
                if msg.media_presentation_duration:
                    summary += f", duration {msg.media_presentation_duration}"
                self.print(f"{msg.source}: {summary}")
            case msgtypes.ManifestWrittenMessage() if msg.destination:
                self.print(f"{msg.source}: wrote '{msg.destination}'", colorama.Fore.GREEN)
            case msgtypes.ManifestFailedMessage():
                line = f"{msg.source}: {msg.reason}"
                if msg.details and msg.details != msg.reason:
                    line += f" ({msg.details})"
                self.print(line, colorama.Fore.RED)
            case msgtypes.NormalizeJobFinishedMessage():
                total = len(msg.succeeded) + len(msg.failed)
                color = colorama.Fore.RED if msg.failed else colorama.Fore.GREEN
                self.print(f"Normalized {len(msg.succeeded)} of {_plural(total, 'manifest')}", color)
            case _:
                pass

    @staticmethod
    def print(text: str, color: str = "") -> None:
        reset = colorama.Style.RESET_ALL if color else ""
        print(f"{color}{text}{reset}", file=sys.stderr)


CLIMessageHandlers = JSONLMessageHandler | TextMessageHandler
