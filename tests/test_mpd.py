#!/usr/bin/python3

import datetime
import math
import xml.etree.ElementTree as ElementTree

import pytest
from dashmpd.errors import (
    ERR_MSG_INVALID_ATTRIBUTE,
    ERR_MSG_INVALID_XML,
    ERR_MSG_UNEXPECTED_ROOT,
    MalformedConditionalUnit,
    MalformedDuration,
    MonthsNotSupported,
    MPDDecodeError,
)
from dashmpd.models.mpd import (
    MPD,
    AdaptationSet,
    BaseURL,
    Period,
    Representation,
    SegmentTemplate,
    SegmentTimeline,
    SegmentTimelineS,
)
from dashmpd.util.conditional import ConditionalBoolValue, ConditionalUintValue
from dashmpd.util.duration import MILLISECOND, SECOND, Duration

LIVE_MANIFEST = """\
<?xml version="1.0" encoding="utf-8"?>
<MPD xmlns="urn:mpeg:dash:schema:mpd:2011" xmlns:cenc="urn:mpeg:cenc:2013"
    type="dynamic" availabilityStartTime="2019-08-01T11:12:13Z" minimumUpdatePeriod="PT2S"
    minBufferTime="PT4S" timeShiftBufferDepth="PT1M0.5S" publishTime="2019-08-01T11:20:00Z"
    profiles="urn:mpeg:dash:profile:isoff-live:2011">
  <BaseURL serviceLocation="a" availabilityTimeComplete="false">https://cdn.example.com/live/</BaseURL>
  <Period id="p0" start="PT0S">
    <AdaptationSet mimeType="video/mp4" contentType="video" segmentAlignment="true"
        subsegmentAlignment="2" startWithSAP="1" bitstreamSwitching="true">
      <Role schemeIdUri="urn:mpeg:dash:role:2011" value="main"/>
      <ContentProtection schemeIdUri="urn:mpeg:dash:mp4protection:2011" value="cenc"
          cenc:default_KID="10000000-1000-1000-1000-100000000001"/>
      <SegmentTemplate timescale="90000" media="$RepresentationID$/$Time$.m4s"
          initialization="$RepresentationID$/init.mp4" startNumber="1"
          availabilityTimeOffset="1.5">
        <SegmentTimeline>
          <S t="0" d="180000" r="-1"/>
          <S d="90000"/>
        </SegmentTimeline>
      </SegmentTemplate>
      <Representation id="v1" width="1280" height="720" frameRate="30000/1001"
          bandwidth="3000000" codecs="avc1.64001f" sar="1:1" scanType="progressive"/>
      <Representation id="v2" width="1920" height="1080" bandwidth="6000000"/>
    </AdaptationSet>
    <AdaptationSet mimeType="audio/mp4" lang="en">
      <Representation id="a1" audioSamplingRate="48000" bandwidth="128000"/>
    </AdaptationSet>
  </Period>
</MPD>
"""


def test_decode_manifest():
    mpd = MPD.decode(LIVE_MANIFEST)

    assert mpd.xmlns == "urn:mpeg:dash:schema:mpd:2011"
    assert mpd.type == "dynamic"
    assert mpd.profiles == "urn:mpeg:dash:profile:isoff-live:2011"
    assert mpd.minimum_update_period == 2 * SECOND
    assert isinstance(mpd.minimum_update_period, Duration)
    assert mpd.min_buffer_time == 4 * SECOND
    assert mpd.time_shift_buffer_depth == 60 * SECOND + 500 * MILLISECOND
    assert mpd.media_presentation_duration is None
    assert mpd.availability_start_time == datetime.datetime(
        2019, 8, 1, 11, 12, 13, tzinfo=datetime.UTC
    )

    assert len(mpd.base_urls) == 1
    assert mpd.base_urls[0].value == "https://cdn.example.com/live/"
    assert mpd.base_urls[0].service_location == "a"
    assert mpd.base_urls[0].availability_time_complete is False

    (period,) = mpd.periods
    assert period.id == "p0"
    assert period.start == 0
    assert period.duration is None

    video, audio = period.adaptation_sets
    assert video.mime_type == "video/mp4"
    assert video.segment_alignment == ConditionalBoolValue(True)
    assert video.subsegment_alignment == ConditionalUintValue(2)
    assert video.start_with_sap == ConditionalUintValue(1)
    assert video.subsegment_starts_with_sap is None
    assert video.bitstream_switching is True
    assert video.roles[0].value == "main"
    assert video.content_protections[0].value == "cenc"

    template = video.segment_template
    assert template is not None
    assert template.timescale == 90000
    assert template.start_number == 1
    assert template.availability_time_offset == 1.5
    assert template.segment_timeline == SegmentTimeline(
        segments=[SegmentTimelineS(t=0, d=180000, r=-1), SegmentTimelineS(d=90000)]
    )

    assert [r.id for r in video.representations] == ["v1", "v2"]
    assert video.representations[0].frame_rate == "30000/1001"
    assert video.representations[0].width == 1280

    assert audio.lang == "en"
    assert audio.segment_alignment is None
    assert audio.representations[0].audio_sampling_rate == "48000"


def test_encode_manifest():
    mpd = MPD(
        xmlns="urn:mpeg:dash:schema:mpd:2011",
        type="static",
        media_presentation_duration=Duration(634566 * MILLISECOND),
        min_buffer_time=Duration(2 * SECOND),
        profiles="urn:mpeg:dash:profile:isoff-on-demand:2011",
        periods=[
            Period(
                adaptation_sets=[
                    AdaptationSet(
                        mime_type="video/mp4",
                        segment_alignment=ConditionalBoolValue(True),
                        start_with_sap=ConditionalUintValue(1),
                        representations=[
                            Representation(
                                id="1", bandwidth=500000, base_urls=[BaseURL(value="video.mp4")]
                            )
                        ],
                    )
                ]
            )
        ],
    )

    assert mpd.encode() == (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<MPD xmlns="urn:mpeg:dash:schema:mpd:2011" type="static" '
        'mediaPresentationDuration="PT10M34.566S" minBufferTime="PT2S" '
        'profiles="urn:mpeg:dash:profile:isoff-on-demand:2011">\n'
        "  <Period>\n"
        '    <AdaptationSet mimeType="video/mp4" segmentAlignment="true" startWithSAP="1">\n'
        '      <Representation id="1" bandwidth="500000">\n'
        "        <BaseURL>video.mp4</BaseURL>\n"
        "      </Representation>\n"
        "    </AdaptationSet>\n"
        "  </Period>\n"
        "</MPD>\n"
    )


def test_encode_empty_manifest():
    # required attributes are always written; empty elements are self-closing
    assert MPD().encode() == '<?xml version="1.0" encoding="utf-8"?>\n<MPD profiles="" />\n'


def test_encode_omits_absent_conditional_units():
    elem = AdaptationSet(mime_type="audio/mp4").to_element("AdaptationSet")
    assert elem.attrib == {"mimeType": "audio/mp4"}

    text = MPD(periods=[Period(adaptation_sets=[AdaptationSet()])]).encode()
    assert "segmentAlignment" not in text
    assert "startWithSAP" not in text
    assert '<AdaptationSet mimeType="" />' in text


def test_encode_scalar_attributes():
    elem = SegmentTimelineS(d=0).to_element("S")
    assert elem.attrib == {"d": "0"}

    mpd = MPD(
        availability_start_time=datetime.datetime(2019, 8, 1, 11, 12, 13, tzinfo=datetime.UTC),
        base_urls=[BaseURL(value="a/", availability_time_complete=False)],
    )
    root = ElementTree.fromstring(mpd.encode())
    assert root.get("availabilityStartTime") == "2019-08-01T11:12:13Z"
    assert root.find("BaseURL").get("availabilityTimeComplete") == "false"


def test_decode_unsigned_attributes_above_int64():
    elem = ElementTree.fromstring('<S t="18446744073709551615" d="9223372036854775808"/>')
    segment = SegmentTimelineS.from_element(elem)
    assert segment.t == (1 << 64) - 1
    assert segment.d == 1 << 63
    assert segment.to_element("S").attrib == {
        "t": "18446744073709551615",
        "d": "9223372036854775808",
    }


@pytest.mark.parametrize(
    "value, expected", [(math.inf, "INF"), (-math.inf, "-INF"), (math.nan, "NaN")]
)
def test_encode_special_float_values(value: float, expected: str):
    elem = SegmentTemplate(availability_time_offset=value).to_element("SegmentTemplate")
    assert elem.get("availabilityTimeOffset") == expected


def test_decode_missing_attributes_use_defaults():
    elem = ElementTree.fromstring('<AdaptationSet lang="de"/>')
    adaptation_set = AdaptationSet.from_element(elem)
    assert adaptation_set == AdaptationSet(lang="de")
    assert adaptation_set.segment_alignment is None
    assert adaptation_set.start_with_sap is None


def test_round_trip_manifest():
    mpd = MPD.decode(LIVE_MANIFEST)
    encoded = mpd.encode()
    assert MPD.decode(encoded) == mpd
    assert MPD.decode(encoded).encode() == encoded

    # unmapped attributes are dropped
    assert "default_KID" not in encoded


@pytest.mark.parametrize(
    "document, tag, attribute, cause",
    [
        ('<MPD mediaPresentationDuration="P1M"/>', "MPD", "mediaPresentationDuration", MonthsNotSupported),
        ('<MPD minBufferTime=" PT2S"/>', "MPD", "minBufferTime", MalformedDuration),
        ('<MPD><Period start="PT"/></MPD>', "Period", "start", MalformedDuration),
        (
            '<MPD><Period><AdaptationSet segmentAlignment="yes"/></Period></MPD>',
            "AdaptationSet",
            "segmentAlignment",
            MalformedConditionalUnit,
        ),
        (
            "<MPD><Period><AdaptationSet><Representation bandwidth='lots'/></AdaptationSet></Period></MPD>",
            "Representation",
            "bandwidth",
            None,
        ),
        (
            '<MPD><Period><AdaptationSet><Representation bandwidth="18446744073709551616"/>'
            "</AdaptationSet></Period></MPD>",
            "Representation",
            "bandwidth",
            None,
        ),
        (
            '<MPD><Period><AdaptationSet><Representation width="-1"/></AdaptationSet></Period></MPD>',
            "Representation",
            "width",
            None,
        ),
    ],
)
def test_decode_invalid_attribute(document: str, tag: str, attribute: str, cause: type | None):
    with pytest.raises(MPDDecodeError) as excinfo:
        MPD.decode(document)
    err = excinfo.value
    assert str(err) == ERR_MSG_INVALID_ATTRIBUTE
    assert err.tag == tag
    assert err.attribute == attribute
    assert err.internal().startswith(f"{tag}@{attribute}: ")
    assert err.wrapped is err.__cause__
    if cause is not None:
        assert isinstance(err.wrapped, cause)


def test_decode_malformed_xml():
    with pytest.raises(MPDDecodeError) as excinfo:
        MPD.decode("<MPD><Period></MPD>")
    assert str(excinfo.value) == ERR_MSG_INVALID_XML
    assert isinstance(excinfo.value.wrapped, ElementTree.ParseError)


def test_decode_unexpected_root():
    with pytest.raises(MPDDecodeError) as excinfo:
        MPD.decode('<Period id="1"/>')
    assert str(excinfo.value) == ERR_MSG_UNEXPECTED_ROOT
    assert excinfo.value.tag == "Period"


def test_decode_bytes_without_namespace():
    mpd = MPD.decode(b'<MPD type="static" mediaPresentationDuration="PT1H"/>')
    assert mpd.xmlns is None
    assert mpd.type == "static"
    assert mpd.media_presentation_duration == 3600 * SECOND
