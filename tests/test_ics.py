from datetime import datetime, timezone

from atriumcal.ics import build_event, get_property, get_text, parse_events, split_blocks, unescape, unfold
from atriumcal.models import UNTITLED

NY = "America/New_York"

SAMPLE = "\r\n".join(
    [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Planning Center//Calendar//EN",
        "BEGIN:VEVENT",
        "UID:one",
        "SUMMARY:Choir Practice\\, Sanctuary",
        "DTSTART;TZID=America/New_York:20240704T093000",
        "DTEND;TZID=America/New_York:20240704T103000",
        "LOCATION:Sanctuary",
        "DESCRIPTION:Bring music\\nand water",
        "BEGIN:VALARM",
        "ACTION:DISPLAY",
        "DESCRIPTION:Reminder",
        "TRIGGER:-PT15M",
        "END:VALARM",
        "END:VEVENT",
        "BEGIN:VTIMEZONE",
        "TZID:America/New_York",
        "BEGIN:STANDARD",
        "DTSTART:19701101T020000",
        "TZOFFSETFROM:-0400",
        "TZOFFSETTO:-0500",
        "END:STANDARD",
        "END:VTIMEZONE",
        "BEGIN:VEVENT",
        "UID:two",
        "SUMMARY:Church Picnic",
        "DTSTART;VALUE=DATE:20240706",
        "DTEND;VALUE=DATE:20240707",
        "END:VEVENT",
        "END:VCALENDAR",
        "",
    ]
)


def test_unfold_normalizes_line_endings_and_joins_continuations():
    text = "DESCRIPTION:A long\r\n  description\r\n\tcontinued\rSUMMARY:x"
    assert unfold(text) == "DESCRIPTION:A long descriptioncontinued\nSUMMARY:x"


def test_unfold_handles_missing_input():
    assert unfold(None) == ""
    assert unfold("") == ""


def test_split_blocks_keeps_only_event_components():
    blocks = split_blocks(unfold(SAMPLE))

    assert len(blocks) == 2
    assert all(b.startswith("BEGIN:VEVENT") for b in blocks)
    assert "VTIMEZONE" not in blocks[0]
    assert "TZOFFSETFROM" not in blocks[0]
    assert "VALARM" not in blocks[0]
    assert "UID:two" in blocks[1]


def test_split_blocks_accepts_unterminated_events():
    text = "BEGIN:VEVENT\nSUMMARY:First\nBEGIN:VEVENT\nSUMMARY:Second\n"
    blocks = split_blocks(text)

    assert [get_text(b, "SUMMARY") for b in blocks] == ["First", "Second"]


def test_split_blocks_without_events_is_empty():
    assert split_blocks("BEGIN:VCALENDAR\nVERSION:2.0\nEND:VCALENDAR\n") == []


def test_get_property_first_occurrence_wins_and_params_are_uppercased():
    block = "\n".join(
        [
            "BEGIN:VEVENT",
            'DTSTART;tzid="America/Chicago";value=DATE-TIME:20240704T093000',
            "DTSTART:20990101T000000Z",
            "DTSTARTISH:nope",
            "END:VEVENT",
        ]
    )
    prop = get_property(block, "DTSTART")

    assert prop is not None
    assert prop.value == "20240704T093000"
    assert prop.params == {"TZID": "America/Chicago", "VALUE": "DATE-TIME"}
    assert get_property(block, "DTEND") is None


def test_get_text_skips_parameters_and_trims():
    block = "BEGIN:VEVENT\nSUMMARY;LANGUAGE=en:  Youth Night  \nEND:VEVENT"
    assert get_text(block, "SUMMARY") == "Youth Night"
    assert get_text(block, "LOCATION") == ""


def test_unescape_restores_delimiters():
    assert unescape("Choir Practice\\, Sanctuary\\nBring music") == "Choir Practice, Sanctuary\nBring music"
    assert unescape("Room A\\; Room B") == "Room A; Room B"
    assert unescape("C:\\\\music\\\\new") == "C:\\music\\new"
    assert unescape(None) == ""


def test_unescape_treats_escaped_backslash_before_n_literally():
    assert unescape("a\\\\nb") == "a\\nb"


def test_build_event_reads_fields_and_resolves_instants():
    event = build_event(split_blocks(unfold(SAMPLE))[0], NY)

    assert event.title == "Choir Practice, Sanctuary"
    assert event.location == "Sanctuary"
    assert event.description == "Bring music\nand water"
    assert event.all_day is False
    assert event.start == datetime(2024, 7, 4, 13, 30, tzinfo=timezone.utc)
    assert event.end == datetime(2024, 7, 4, 14, 30, tzinfo=timezone.utc)


def test_build_event_marks_date_values_all_day():
    event = build_event(split_blocks(unfold(SAMPLE))[1], NY)

    assert event.all_day is True
    assert event.start == datetime(2024, 7, 6, 4, 0, tzinfo=timezone.utc)
    assert event.end == datetime(2024, 7, 7, 4, 0, tzinfo=timezone.utc)
    assert event.location == ""
    assert event.description == ""


def test_build_event_degrades_missing_fields_to_defaults():
    event = build_event("BEGIN:VEVENT\nSUMMARY:\nDTSTART:someday\nEND:VEVENT\n", NY)

    assert event.title == UNTITLED
    assert event.start is None
    assert event.end is None
    assert event.all_day is False


def test_parse_events_is_repeatable():
    first = parse_events(SAMPLE, NY)
    second = parse_events(SAMPLE, NY)

    assert len(first) == 2
    assert first == second


def test_parse_events_without_events():
    assert parse_events("", NY) == []
    assert parse_events(None, NY) == []


def test_quoted_parameter_values_may_contain_colons():
    block = "\n".join(
        [
            "BEGIN:VEVENT",
            'LOCATION;ALTREP="http://maps.example/x;y":Fellowship Hall',
            'DTSTART;TZID="America/New_York":20240704T093000',
            "END:VEVENT",
        ]
    )

    assert get_text(block, "LOCATION") == "Fellowship Hall"
    prop = get_property(block, "LOCATION")
    assert prop is not None
    assert prop.params == {"ALTREP": "http://maps.example/x;y"}
    assert build_event(block, NY).start == datetime(2024, 7, 4, 13, 30, tzinfo=timezone.utc)
