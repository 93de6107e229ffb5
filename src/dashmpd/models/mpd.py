#!/usr/bin/python3

# http://standards.iso.org/ittf/PubliclyAvailableStandards/MPEG-DASH_schema_files/DASH-MPD.xsd

import datetime
import xml.etree.ElementTree as ElementTree
from typing import ClassVar, Self

import msgspec

from ..errors import ERR_MSG_INVALID_XML, ERR_MSG_UNEXPECTED_ROOT, MPDDecodeError
from ..util.conditional import ConditionalUint
from ..util.duration import Duration
from ._xml import UInt, XMLStruct, decode_element, encode_element, local_name

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'


class Descriptor(XMLStruct):
    # DescriptorType; used for Role and ContentProtection elements
    scheme_id_uri: str | None = None
    value: str | None = None


class BaseURL(XMLStruct):
    xml_text_field: ClassVar[str | None] = "value"

    value: str = ""
    service_location: str | None = None
    byte_range: str | None = None
    availability_time_offset: UInt | None = None
    availability_time_complete: bool | None = None


class SegmentTimelineS(XMLStruct):
    # presentation time of the first segment in the series
    t: UInt | None = None

    # segment duration in timescale units; always written
    d: UInt = 0

    # repeat count; -1 repeats until the next S element or the end of the period
    r: int | None = None


class SegmentTimeline(XMLStruct):
    segments: list[SegmentTimelineS] = msgspec.field(name="S", default_factory=list)


class SegmentTemplate(XMLStruct):
    duration: UInt | None = None
    timescale: UInt | None = None
    media: str | None = None
    initialization: str | None = None
    start_number: UInt | None = None
    presentation_time_offset: UInt | None = None
    availability_time_offset: float | None = None
    availability_time_complete: bool | None = None
    segment_timeline: SegmentTimeline | None = msgspec.field(
        name="SegmentTimeline", default=None
    )


class Representation(XMLStruct):
    id: str | None = None
    width: UInt | None = None
    height: UInt | None = None
    frame_rate: str | None = None
    bandwidth: UInt | None = None
    audio_sampling_rate: str | None = None
    codecs: str | None = None
    sar: str | None = None
    scan_type: str | None = None
    content_protections: list[Descriptor] = msgspec.field(
        name="ContentProtection", default_factory=list
    )
    segment_template: SegmentTemplate | None = msgspec.field(
        name="SegmentTemplate", default=None
    )
    base_urls: list[BaseURL] = msgspec.field(name="BaseURL", default_factory=list)


class AdaptationSet(XMLStruct):
    mime_type: str = ""
    content_type: str | None = None
    segment_alignment: ConditionalUint = None
    subsegment_alignment: ConditionalUint = None
    start_with_sap: ConditionalUint = msgspec.field(name="startWithSAP", default=None)
    subsegment_starts_with_sap: ConditionalUint = msgspec.field(
        name="subsegmentStartsWithSAP", default=None
    )
    bitstream_switching: bool | None = None
    lang: str | None = None
    par: str | None = None
    codecs: str | None = None
    roles: list[Descriptor] = msgspec.field(name="Role", default_factory=list)
    base_urls: list[BaseURL] = msgspec.field(name="BaseURL", default_factory=list)
    segment_template: SegmentTemplate | None = msgspec.field(
        name="SegmentTemplate", default=None
    )
    content_protections: list[Descriptor] = msgspec.field(
        name="ContentProtection", default_factory=list
    )
    representations: list[Representation] = msgspec.field(
        name="Representation", default_factory=list
    )


class Period(XMLStruct):
    start: Duration | None = None
    id: str | None = None
    duration: Duration | None = None
    adaptation_sets: list[AdaptationSet] = msgspec.field(
        name="AdaptationSet", default_factory=list
    )
    base_urls: list[BaseURL] = msgspec.field(name="BaseURL", default_factory=list)


class MPD(XMLStruct):
    """
    Root element of an MPEG-DASH Media Presentation Description.

    Only the attributes and elements declared here are mapped; anything else in a decoded
    document is dropped when it is encoded again.
    """

    xmlns: str | None = None
    type: str | None = None
    minimum_update_period: Duration | None = None
    availability_start_time: datetime.datetime | None = None
    availability_end_time: datetime.datetime | None = None
    media_presentation_duration: Duration | None = None
    min_buffer_time: Duration | None = None
    suggested_presentation_delay: Duration | None = None
    time_shift_buffer_depth: Duration | None = None
    publish_time: datetime.datetime | None = None
    profiles: str = ""
    base_urls: list[BaseURL] = msgspec.field(name="BaseURL", default_factory=list)
    periods: list[Period] = msgspec.field(name="Period", default_factory=list)

    @classmethod
    def decode(cls, text: str | bytes) -> Self:
        """
        Parses an MPD document.

        Raises MPDDecodeError if the document is not well-formed, if the root element is not
        MPD, or if any mapped attribute has a value that cannot be decoded.
        """
        try:
            root = ElementTree.fromstring(text)
        except ElementTree.ParseError as exc:
            raise MPDDecodeError(ERR_MSG_INVALID_XML, str(exc), exc) from exc

        if local_name(root.tag) != "MPD":
            raise MPDDecodeError(
                ERR_MSG_UNEXPECTED_ROOT,
                f"expected MPD root element, got {root.tag!r}",
                tag=local_name(root.tag),
            )

        manifest = decode_element(cls, root)

        # ElementTree folds the default namespace declaration into element tags
        if root.tag.startswith("{") and manifest.xmlns is None:
            manifest.xmlns, _, _ = root.tag[1:].partition("}")
        return manifest

    def encode(self) -> str:
        # generates MPD XML; empty elements are written in self-closing form
        root = encode_element(self, "MPD")
        ElementTree.indent(root, space="  ")
        body = ElementTree.tostring(root, encoding="unicode", short_empty_elements=True)
        return f"{XML_DECLARATION}\n{body}\n"
