#!/usr/bin/python3

import pathlib

import msgspec


class BaseMessage(msgspec.Struct, tag=True):
    pass


class ManifestLoadedMessage(BaseMessage, tag="manifest-loaded"):
    source: str
    size: int


class ManifestDecodedMessage(BaseMessage, tag="manifest-decoded"):
    source: str
    manifest_type: str | None
    num_periods: int
    num_adaptation_sets: int
    num_representations: int

    media_presentation_duration: str | None = None
    """ Lexical form of the duration, if the manifest declares one. """


class ManifestWrittenMessage(BaseMessage, tag="manifest-written"):
    source: str

    destination: pathlib.Path | None = None
    """ Output file path; None if the manifest was written to standard output. """


class ManifestFailedMessage(BaseMessage, tag="manifest-failed"):
    source: str
    reason: str
    details: str | None = None


class NormalizeJobFinishedMessage(BaseMessage, tag="normalize-finished"):
    succeeded: list[str]
    failed: list[str]
