import typing

import mido
import pytest

import flero.audio_output
import flero.note_sequence
import flero.scheduler
import flero.tuning


class FakeAudioOutput:

	"""Audio output stub with a hand-driven clock that records scheduled tones."""

	def __init__ (self, current_time: float = 0.0) -> None:

		"""Start the clock at ``current_time``."""

		self.current_time = current_time
		self.tones: typing.List[flero.audio_output.ScheduledTone] = []
		self.cancellations: typing.List[float] = []


	def schedule_tone (self, waveform: str, frequency: float, start_time: float, stop_time: float) -> None:

		"""Record the tone."""

		self.tones.append(flero.audio_output.ScheduledTone(waveform, frequency, start_time, stop_time))


	def cancel_scheduled (self, after_time: float) -> None:

		"""Drop recorded tones that have not started, like a real output would."""

		self.cancellations.append(after_time)
		self.tones = [tone for tone in self.tones if tone.start_time < after_time]


class NumberFrequency:

	"""Frequency source that returns the note number itself, for readable assertions."""

	def frequency_of (self, note_number: int) -> float:

		"""Return the note number as a frequency."""

		return float(note_number)


class FakeMidiOut:

	"""MIDI output stub that records outgoing messages."""

	def __init__ (self) -> None:

		"""Start with no sent messages."""

		self.sent: typing.List[mido.Message] = []
		self.closed = False


	def send (self, message: mido.Message) -> None:

		"""Record the message."""

		self.sent.append(message)


	def close (self) -> None:

		"""Mark the fake device closed."""

		self.closed = True


# Module-level reference so tests can inspect the most recently opened FakeMidiOut.
_current_fake_output: typing.Optional[FakeMidiOut] = None


def _fake_get_output_names () -> typing.List[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fresh recording output regardless of the name."""

	global _current_fake_output
	_current_fake_output = FakeMidiOut()
	return _current_fake_output


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido so MIDI outputs open recording fakes."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def audio_output () -> FakeAudioOutput:

	"""A fake audio output with its clock at zero."""

	return FakeAudioOutput()


@pytest.fixture
def note_sequence () -> flero.note_sequence.NoteSequence:

	"""An empty note sequence."""

	return flero.note_sequence.create_empty_note_sequence()


@pytest.fixture
def scheduler (audio_output: FakeAudioOutput, note_sequence: flero.note_sequence.NoteSequence) -> flero.scheduler.Scheduler:

	"""A stopped scheduler at 144 BPM playing ``note_sequence`` into ``audio_output``."""

	return flero.scheduler.create_sequencer(
		scale = NumberFrequency(),
		tempo = 144,
		audio_output = audio_output,
		note_sequence = note_sequence
	)
