"""Tests for the replay decoder."""

import pytest

from eyelink_reader.errors import DecoderError
from eyelink_reader.models import (
    EventRecord,
    Exhausted,
    OpaqueRecord,
    RecordingRecord,
    RecordKind,
    SampleRecord,
)
from eyelink_reader.replay import (
    BAD_MARKERS,
    BAD_RECORD,
    BAD_TRIAL,
    FILE_NOT_FOUND,
    JsonlDecoder,
    ReplayDecoder,
    ReplaySession,
    load_record_dump,
    parse_record,
)


class TestParseRecord:
    def test_sample(self):
        record = parse_record({"type": 200, "time": 5, "gx": [1.0, 2.0], "hdata": [0, 1, 2, 3, 4, 5, 6, 7]})
        assert isinstance(record, SampleRecord)
        assert record.gx == (1.0, 2.0)
        assert record.hdata == (0, 1, 2, 3, 4, 5, 6, 7)
        assert record.px == (-32768.0, -32768.0)

    def test_event(self):
        record = parse_record({"type": 24, "sttime": 10, "message": "TRIALID 3"})
        assert isinstance(record, EventRecord)
        assert record.kind == RecordKind.MESSAGEEVENT
        assert record.message == "TRIALID 3"

    def test_recording(self):
        record = parse_record({"type": 30, "time": 7, "sample_rate": 500.0})
        assert isinstance(record, RecordingRecord)
        assert record.sample_rate == 500.0

    def test_unknown_kind(self):
        assert parse_record({"type": 99, "time": 12}) == OpaqueRecord(kind=99, time=12)

    def test_end_of_stream(self):
        assert isinstance(parse_record({"type": 0}), Exhausted)

    def test_unknown_field(self):
        with pytest.raises(DecoderError, match="pupil") as excinfo:
            parse_record({"type": 200, "time": 1, "pupil": 3.0}, line=4)
        assert excinfo.value.code == BAD_RECORD

    def test_missing_type(self):
        with pytest.raises(DecoderError, match="record type"):
            parse_record({"time": 1})

    def test_not_an_object(self):
        with pytest.raises(DecoderError, match="JSON object") as excinfo:
            parse_record([1, 2], line=3)
        assert excinfo.value.code == BAD_RECORD

    def test_scalar_pair_rejected(self):
        with pytest.raises(DecoderError, match="px") as excinfo:
            parse_record({"type": 200, "time": 1, "px": 5.0}, line=2)
        assert excinfo.value.code == BAD_RECORD

    def test_short_hdata_rejected(self):
        with pytest.raises(DecoderError, match="hdata"):
            parse_record({"type": 200, "time": 1, "hdata": [0, 1]})

    def test_text_timestamp_rejected(self):
        with pytest.raises(DecoderError, match="sttime"):
            parse_record({"type": 24, "sttime": "1000", "message": "TRIALID 1"})
        with pytest.raises(DecoderError, match="time"):
            parse_record({"type": 99, "time": "later"})


class TestLoadRecordDump:
    def test_load(self, record_dump):
        records, preamble = load_record_dump(record_dump)
        assert len(records) == 9
        assert preamble.splitlines() == ["** CONVERTED FROM D:\\data\\sub01.edf", "** EYELINK 1000 PLUS"]

    def test_blank_lines_skipped(self, tmp_path):
        path = tmp_path / "dump.jsonl"
        path.write_text('\n{"type": 200, "time": 1}\n\n')
        records, preamble = load_record_dump(path)
        assert records == [SampleRecord(time=1)]
        assert preamble == ""

    def test_non_object_line(self, tmp_path):
        path = tmp_path / "dump.jsonl"
        path.write_text('{"type": 200, "time": 1}\n5\n')
        with pytest.raises(DecoderError, match="Line 2") as excinfo:
            load_record_dump(path)
        assert excinfo.value.code == BAD_RECORD

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "dump.jsonl"
        path.write_text('{"type": 200, "time": 1}\n{not json\n')
        with pytest.raises(DecoderError, match="Line 2"):
            load_record_dump(path)


class TestNavigation:
    def test_trials(self, recording_stream):
        session = ReplaySession(recording_stream)
        session.set_trial_boundary_markers("TRIALID", "TRIAL_RESULT")
        assert session.trial_count() == 2

        session.seek_trial(0)
        header = session.trial_header()
        assert (header.starttime, header.endtime, header.duration) == (1000, 2000, 1000)
        assert header.rec.time == 1001
        assert next_message(session) == "TRIALID 1"

        session.seek_trial(1)
        header = session.trial_header()
        assert (header.starttime, header.endtime) == (3000, 3500)
        assert header.rec.time == 1001

    def test_missing_end_marker_uses_last_record(self, recording_stream):
        session = ReplaySession(recording_stream)
        session.set_trial_boundary_markers("TRIALID", "TRIAL_END")
        session.seek_trial(0)
        assert session.trial_header().endtime == 2500

    def test_empty_end_marker(self, recording_stream):
        session = ReplaySession(recording_stream)
        session.set_trial_boundary_markers("TRIALID", "")
        session.seek_trial(1)
        assert session.trial_header().endtime == 3500

    def test_no_matching_start_marker(self, recording_stream):
        session = ReplaySession(recording_stream)
        session.set_trial_boundary_markers("SYNCTIME", "TRIAL_RESULT")
        assert session.trial_count() == 0

    def test_identical_markers_rejected(self, recording_stream):
        session = ReplaySession(recording_stream)
        with pytest.raises(DecoderError) as excinfo:
            session.set_trial_boundary_markers("TRIALID", "TRIALID")
        assert excinfo.value.code == BAD_MARKERS

    def test_empty_start_marker_rejected(self, recording_stream):
        with pytest.raises(DecoderError):
            ReplaySession(recording_stream).set_trial_boundary_markers("", "TRIAL_RESULT")

    def test_seek_out_of_range(self, recording_stream):
        session = ReplaySession(recording_stream)
        session.set_trial_boundary_markers("TRIALID", "TRIAL_RESULT")
        with pytest.raises(DecoderError) as excinfo:
            session.seek_trial(2)
        assert excinfo.value.code == BAD_TRIAL

    def test_header_before_seek(self, recording_stream):
        session = ReplaySession(recording_stream)
        session.set_trial_boundary_markers("TRIALID", "TRIAL_RESULT")
        with pytest.raises(DecoderError):
            session.trial_header()


def next_message(session):
    return session.next_record().message


class TestSessionFiltering:
    def test_events_only(self, recording_stream):
        session = ReplaySession(recording_stream, want_events=True, want_samples=False)
        kinds = drain(session)
        assert RecordKind.SAMPLE_TYPE not in kinds
        assert RecordKind.MESSAGEEVENT in kinds

    def test_samples_only_still_navigates(self, recording_stream):
        session = ReplaySession(recording_stream, want_events=False, want_samples=True)
        session.set_trial_boundary_markers("TRIALID", "TRIAL_RESULT")
        assert session.trial_count() == 2
        session.seek_trial(0)
        assert isinstance(session.next_record(), RecordingRecord)
        assert all(kind != RecordKind.MESSAGEEVENT for kind in drain(session))

    def test_exhausted_at_end(self):
        session = ReplaySession([SampleRecord(time=1)])
        assert session.next_record() == SampleRecord(time=1)
        assert isinstance(session.next_record(), Exhausted)
        assert isinstance(session.next_record(), Exhausted)

    def test_closed_session(self):
        session = ReplaySession([SampleRecord(time=1)])
        session.close()
        with pytest.raises(DecoderError):
            session.next_record()


def drain(session):
    kinds = []
    while True:
        record = session.next_record()
        if isinstance(record, Exhausted):
            return kinds
        kinds.append(record.kind)


class TestDecoders:
    def test_replay_decoder_independent_sessions(self, recording_stream):
        decoder = ReplayDecoder(recording_stream, preamble="** TEST")
        first = decoder.open("any.edf", 2, True, False)
        second = decoder.open("any.edf", 2, True, True)
        first.next_record()
        assert second.next_record() == recording_stream[0]
        assert first.preamble_text() == "** TEST"

    def test_jsonl_decoder(self, record_dump):
        session = JsonlDecoder().open(record_dump, 2, True, True)
        session.set_trial_boundary_markers("TRIALID", "TRIAL_RESULT")
        assert session.trial_count() == 2
        assert "EYELINK 1000 PLUS" in session.preamble_text()

    def test_jsonl_decoder_missing_file(self, tmp_path):
        with pytest.raises(DecoderError) as excinfo:
            JsonlDecoder().open(tmp_path / "missing.jsonl", 2, True, True)
        assert excinfo.value.code == FILE_NOT_FOUND
