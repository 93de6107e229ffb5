#!/usr/bin/python3

"""dashmpd - MPEG-DASH manifest models with XSD duration and conditional unit codecs."""

from .errors import (
    MalformedConditionalUnit,
    MalformedDuration,
    MonthsNotSupported,
    MPDDecodeError,
    MPDError,
)
from .models.mpd import (
    MPD,
    AdaptationSet,
    BaseURL,
    Descriptor,
    Period,
    Representation,
    SegmentTemplate,
    SegmentTimeline,
    SegmentTimelineS,
)
from .util.conditional import (
    ConditionalBoolValue,
    ConditionalUint,
    ConditionalUintValue,
    format_conditional_uint,
    parse_conditional_uint,
)
from .util.duration import (
    Duration,
    format_duration,
    parse_duration,
    parse_duration_pattern,
)

__all__ = [
    "MPD",
    "AdaptationSet",
    "BaseURL",
    "ConditionalBoolValue",
    "ConditionalUint",
    "ConditionalUintValue",
    "Descriptor",
    "Duration",
    "MPDDecodeError",
    "MPDError",
    "MalformedConditionalUnit",
    "MalformedDuration",
    "MonthsNotSupported",
    "Period",
    "Representation",
    "SegmentTemplate",
    "SegmentTimeline",
    "SegmentTimelineS",
    "format_conditional_uint",
    "format_duration",
    "parse_conditional_uint",
    "parse_duration",
    "parse_duration_pattern",
]
