import pytest

from midicontrol.buffered_midi_out import BufferedMidiOut
from midicontrol.midi_io import MidiInHandler, MidiOutputPort


class RecordingOut(MidiOutputPort):
    def __init__(self):
        self.sent = []

    def send_control_change(self, channel, cc, value):
        self.sent.append(("cc", channel, cc, value))

    def send_note_on(self, channel, note, velocity):
        self.sent.append(("on", channel, note, velocity))

    def send_note_off(self, channel, note, velocity):
        self.sent.append(("off", channel, note, velocity))

    def send_program_change(self, channel, program):
        self.sent.append(("pc", channel, program))

    def send_pitch_bend(self, channel, value):
        self.sent.append(("pb", channel, value))

    def send_channel_pressure(self, channel, pressure):
        self.sent.append(("at", channel, pressure))

    def send_sys_ex(self, data):
        self.sent.append(("sx", bytes(data)))


class CountingSource:
    def __init__(self):
        self.polls = 0

    def poll(self):
        self.polls += 1
        return None


@pytest.fixture
def out():
    return RecordingOut()


def make(out, **kwargs):
    kwargs.setdefault("sleep", lambda _s: None)
    return BufferedMidiOut(out, **kwargs)


def test_messages_wait_for_flush(out):
    buffered = make(out)
    buffered.send_control_change(0, 7, 100)
    assert out.sent == []
    assert buffered.pending_count == 1
    buffered.flush()
    assert out.sent == [("cc", 0, 7, 100)]
    assert buffered.pending_count == 0


def test_same_target_is_deduplicated(out):
    buffered = make(out)
    buffered.send_control_change(0, 7, 10)
    buffered.send_control_change(0, 7, 20)
    assert buffered.pending_count == 1
    buffered.flush()
    assert out.sent == [("cc", 0, 7, 20)]


def test_resend_after_flush_is_buffered_again(out):
    buffered = make(out)
    buffered.send_control_change(2, 1, 64)
    buffered.flush()
    buffered.send_control_change(2, 1, 64)
    assert buffered.pending_count == 1
    buffered.flush()
    assert out.sent == [("cc", 2, 1, 64), ("cc", 2, 1, 64)]


def test_note_on_and_off_are_distinct_targets(out):
    buffered = make(out)
    buffered.send_note_on(0, 60, 100)
    buffered.send_note_off(0, 60, 0)
    assert buffered.pending_count == 2
    buffered.flush()
    assert out.sent == [("on", 0, 60, 100), ("off", 0, 60, 0)]


def test_update_limits_messages(out):
    buffered = make(out)
    for cc in range(5):
        buffered.send_control_change(0, cc, cc + 1)
    assert buffered.update(2) == 2
    assert buffered.pending_count == 3
    assert out.sent == [("cc", 0, 0, 1), ("cc", 0, 1, 2)]


def test_update_zero_sends_all(out):
    buffered = make(out)
    for cc in range(5):
        buffered.send_control_change(1, cc, 9)
    assert buffered.update(0) == 5
    assert buffered.pending_count == 0
    assert len(out.sent) == 5


def test_update_with_nothing_pending(out):
    buffered = make(out)
    assert buffered.update() == 0
    assert out.sent == []


def test_clear_drops_pending(out):
    buffered = make(out)
    buffered.send_control_change(0, 7, 3)
    buffered.clear()
    assert buffered.pending_count == 0
    buffered.flush()
    assert out.sent == []


def test_immediate_flush_sends_and_keeps_buffer(out):
    buffered = make(out, immediate_flush=True)
    assert buffered.immediate_flush is True
    buffered.send_control_change(0, 74, 50)
    assert out.sent == [("cc", 0, 74, 50)]
    assert buffered.pending_count == 1


def test_enabling_immediate_flush_flushes_pending(out):
    buffered = make(out)
    buffered.send_note_on(3, 40, 90)
    buffered.immediate_flush = True
    assert out.sent == [("on", 3, 40, 90)]
    assert buffered.pending_count == 0


def test_pass_through_messages(out):
    buffered = make(out)
    buffered.send_program_change(0, 5)
    buffered.send_pitch_bend(1, 8192)
    buffered.send_channel_pressure(2, 30)
    buffered.send_sys_ex(b"\x01\x02")
    assert out.sent == [("pc", 0, 5), ("pb", 1, 8192), ("at", 2, 30), ("sx", b"\x01\x02")]
    assert buffered.pending_count == 0


def test_zero_buffer_size_uses_default(out):
    assert make(out, buffer_size=0).capacity == 64


def test_full_buffer_overwrites_oldest_slot(out):
    buffered = make(out, buffer_size=2)
    buffered.send_control_change(0, 1, 11)
    buffered.send_control_change(0, 2, 22)
    buffered.send_control_change(0, 3, 33)
    buffered.flush()
    assert out.sent == [("cc", 0, 3, 33), ("cc", 0, 2, 22)]
    assert buffered.pending_count == 0


def test_delays_between_messages(out):
    delays = []
    buffered = BufferedMidiOut(out, sleep=delays.append)
    for cc in range(3):
        buffered.send_control_change(0, cc, 1)
    buffered.flush()
    assert len(delays) == 2


def test_high_priority_skips_delays(out):
    delays = []
    buffered = BufferedMidiOut(out, sleep=delays.append)
    buffered.high_priority = True
    for cc in range(3):
        buffered.send_control_change(0, cc, 1)
    buffered.flush()
    assert delays == []
    assert len(out.sent) == 3


def test_polls_midi_input(out):
    source = CountingSource()
    buffered = make(out, midi_in=MidiInHandler(source))
    assert source.polls == 1
    buffered.send_program_change(0, 1)
    assert source.polls == 2


def test_many_flush_cycles_keep_deduplicating(out):
    buffered = make(out, buffer_size=4)
    for round_number in range(10):
        buffered.send_control_change(0, 7, round_number)
        buffered.send_control_change(0, 7, round_number + 1)
        assert buffered.pending_count == 1
        buffered.flush()
    assert len(out.sent) == 10
    assert out.sent[-1] == ("cc", 0, 7, 10)