"""Audio output: the clock and tone sink the scheduler drives.

The scheduler never produces sound itself.  It hands tones with absolute start
and stop timestamps to an ``AudioOutput``, which owns a monotonic clock and is
responsible for starting and stopping each tone on time.

``MidiToneOutput`` is the bundled implementation.  It turns each tone into a
note-on/note-off pair on a MIDI port (via ``mido``), converting the frequency to
the nearest MIDI note plus a pitch-bend offset and the waveform to a General
MIDI program.  Messages wait in a time-ordered queue and are sent from an
asyncio task that sleeps until shortly before each one is due and then
busy-waits for the remainder.

Pitch bend is per channel, so simultaneous tones that need different bends
share whichever bend was sent last.  Twelve-tone equal temperament never needs
a bend.
"""

import asyncio
import dataclasses
import heapq
import itertools
import logging
import math
import time
import typing

import mido

import flero.constants


logger = logging.getLogger(__name__)


@typing.runtime_checkable
class AudioOutput (typing.Protocol):

	"""
	Protocol for the clock and tone sink used by the scheduler.
	"""

	@property
	def current_time (self) -> float:

		"""
		Monotonic clock in seconds, in the same time base as tone timestamps.
		"""

		...


	def schedule_tone (self, waveform: str, frequency: float, start_time: float, stop_time: float) -> None:

		"""
		Play a tone of ``frequency`` Hz between two clock timestamps.
		"""

		...


	def cancel_scheduled (self, after_time: float) -> None:

		"""
		Drop tones that have not started by ``after_time``.
		"""

		...


@dataclasses.dataclass(frozen=True)
class ScheduledTone:

	"""
	A tone handed to an audio output.
	"""

	waveform: str
	frequency: float
	start_time: float
	stop_time: float


@dataclasses.dataclass(order=True)
class ToneEvent:

	"""
	A MIDI message waiting to be sent at a clock timestamp.

	At equal timestamps note-offs sort before note-ons, so a tone that ends
	exactly where the next one on the same pitch begins does not cut it short.
	"""

	time: float
	priority: int											# 0 = note_off, 1 = note_on
	sequence: int
	message_type: str = dataclasses.field(compare=False)
	tone_id: int = dataclasses.field(compare=False)
	note: int = dataclasses.field(compare=False)
	bend: int = dataclasses.field(compare=False, default=0)
	program: int = dataclasses.field(compare=False, default=0)


def frequency_to_midi (frequency: float) -> typing.Tuple[int, int]:

	"""Convert a frequency to the nearest MIDI note and a pitch-bend value.

	The bend assumes a range of ``PITCH_BEND_RANGE`` semitones either way and is
	zero for exact equal-temperament pitches.  Frequencies outside the MIDI note
	range are clamped to the lowest or highest note.

	Returns:
		``(note, bend)`` with ``note`` in 0..127 and ``bend`` in -8192..8191.
	"""

	if not frequency > 0:
		raise ValueError(f"Frequency must be positive, got {frequency!r}")

	exact = flero.constants.MIDI_A4 + 12 * math.log2(frequency / flero.constants.REFERENCE_FREQUENCY)
	note = round(exact)

	if note < 0 or note > 127:
		logger.warning(f"Frequency {frequency:.2f} Hz is outside the MIDI note range - clamping")
		return min(max(note, 0), 127), 0

	bend = round((exact - note) / flero.constants.PITCH_BEND_RANGE * 8191)

	return note, min(max(bend, -8192), 8191)


def open_output_port (device_name: typing.Optional[str] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:

	"""
	Open a MIDI output port by name, or the first available port when no name is given.

	Returns:
		A tuple of (device_name, midi_out) or (None, None) when no port could be opened.
	"""

	try:
		outputs = mido.get_output_names()
		logger.info(f"Available MIDI outputs: {outputs}")

		if not outputs:
			logger.error("No MIDI output devices found.")
			return None, None

		if device_name is None:
			device_name = outputs[0]

			if len(outputs) > 1:
				logger.warning(f"Several MIDI outputs found - using '{device_name}'. Pass a device name to choose another.")

		elif device_name not in outputs:
			logger.error(f"MIDI output device '{device_name}' not found. Available devices: {outputs}")
			return None, None

		midi_out = mido.open_output(device_name)
		logger.info(f"Opened MIDI output: {device_name}")

		return device_name, midi_out

	except Exception as e:
		logger.error(f"Failed to open MIDI output: {e}")
		return None, None


class MidiToneOutput:

	"""
	An ``AudioOutput`` that plays tones as timed notes on a MIDI port.
	"""

	def __init__ (
		self,
		output_device_name: typing.Optional[str] = None,
		channel: int = 0,
		gain: float = flero.constants.OUTPUT_GAIN,
		spin_wait: bool = True
	) -> None:

		"""Open the MIDI port and start the clock.

		Parameters:
			output_device_name: MIDI output port name. When omitted, the first
				available port is used.
			channel: MIDI channel (0-15) all tones are played on.
			gain: Output level in (0, 1], mapped onto note velocity.
			spin_wait: When True, busy-wait for the final sub-millisecond before
				each message for tighter timing at the cost of some CPU.
		"""

		if not 0 <= channel <= 15:
			raise ValueError(f"MIDI channel must be 0-15, got {channel}")

		if not 0 < gain <= 1:
			raise ValueError(f"Gain must be in (0, 1], got {gain}")

		self.channel = channel
		self.velocity = max(1, round(127 * gain))
		self.spin_wait = spin_wait

		self._origin = time.perf_counter()
		self._spin_threshold: float = 0.001
		self._max_idle: float = 0.005

		self.event_queue: typing.List[ToneEvent] = []
		self._sequence = itertools.count()
		self._tone_ids = itertools.count()
		self.active_notes: typing.Set[int] = set()
		self._program: typing.Optional[int] = None
		self._bend: int = 0

		self.task: typing.Optional[asyncio.Task] = None
		self.running = False

		self.output_device_name, self.midi_out = open_output_port(output_device_name)


	@property
	def current_time (self) -> float:

		"""Seconds since this output was created."""

		return time.perf_counter() - self._origin


	def schedule_tone (self, waveform: str, frequency: float, start_time: float, stop_time: float) -> None:

		"""
		Queue a note-on at ``start_time`` and a note-off at ``stop_time``.
		"""

		if waveform not in flero.constants.WAVEFORM_PROGRAMS:
			raise ValueError(f"Unknown waveform {waveform!r}. Available: {sorted(flero.constants.WAVEFORM_PROGRAMS)}")

		if not stop_time > start_time:
			raise ValueError("Tone must stop after it starts")

		note, bend = frequency_to_midi(frequency)
		program = flero.constants.WAVEFORM_PROGRAMS[waveform]
		tone_id = next(self._tone_ids)

		heapq.heappush(self.event_queue, ToneEvent(
			time = start_time,
			priority = 1,
			sequence = next(self._sequence),
			message_type = 'note_on',
			tone_id = tone_id,
			note = note,
			bend = bend,
			program = program
		))

		heapq.heappush(self.event_queue, ToneEvent(
			time = stop_time,
			priority = 0,
			sequence = next(self._sequence),
			message_type = 'note_off',
			tone_id = tone_id,
			note = note
		))

		logger.debug(f"Queued {waveform} tone {frequency:.2f} Hz (note {note}) {start_time:.4f}-{stop_time:.4f}")


	def cancel_scheduled (self, after_time: float) -> None:

		"""
		Drop every tone whose note-on is due at or after ``after_time``.

		Tones already sounding keep their note-off.
		"""

		cancelled = {
			event.tone_id for event in self.event_queue
			if event.message_type == 'note_on' and event.time >= after_time
		}

		if not cancelled:
			return

		self.event_queue = [event for event in self.event_queue if event.tone_id not in cancelled]
		heapq.heapify(self.event_queue)

		logger.debug(f"Cancelled {len(cancelled)} pending tones")


	def process_due (self, now: float) -> int:

		"""
		Send every queued message due at or before ``now``.  Returns how many were sent.
		"""

		sent = 0

		while self.event_queue and self.event_queue[0].time <= now:

			event = heapq.heappop(self.event_queue)

			if event.message_type == 'note_on':

				if event.program != self._program:
					self._send(mido.Message('program_change', channel=self.channel, program=event.program))
					self._program = event.program

				if event.bend != self._bend:
					self._send(mido.Message('pitchwheel', channel=self.channel, pitch=event.bend))
					self._bend = event.bend

				self._send(mido.Message('note_on', channel=self.channel, note=event.note, velocity=self.velocity))
				self.active_notes.add(event.note)

			else:
				self._send(mido.Message('note_off', channel=self.channel, note=event.note, velocity=0))
				self.active_notes.discard(event.note)

			sent += 1

		return sent


	async def start (self) -> None:

		"""
		Start dispatching queued messages in a separate asyncio task.
		"""

		if self.running:
			return

		self.running = True
		self.task = asyncio.create_task(self._run_loop())

		logger.info("MIDI tone output started")


	async def stop (self) -> None:

		"""
		Stop dispatching, silence sounding notes and close the port.
		"""

		if not self.running and self.midi_out is None:
			return

		self.running = False

		if self.task:
			self.task.cancel()

			try:
				await self.task
			except asyncio.CancelledError:
				pass

			self.task = None

		self.event_queue = []
		self.panic()

		if self.midi_out:
			self.midi_out.close()
			self.midi_out = None

		logger.info("MIDI tone output stopped")


	async def _run_loop (self) -> None:

		"""Dispatch loop: send due messages, then sleep until the next one.

		Sleeps never exceed ``_max_idle`` so tones queued while the loop is idle
		are picked up promptly.
		"""

		while self.running:

			self.process_due(self.current_time)

			if self.event_queue:
				target = min(self.event_queue[0].time, self.current_time + self._max_idle)
			else:
				target = self.current_time + self._max_idle

			sleep_time = target - self.current_time

			if sleep_time <= 0:
				await asyncio.sleep(0)

			elif self.spin_wait and sleep_time > self._spin_threshold:
				await asyncio.sleep(sleep_time - self._spin_threshold)
				while self.current_time < target:
					pass

			else:
				await asyncio.sleep(sleep_time)


	def panic (self) -> None:

		"""
		Send note-off for every sounding note, then All Notes Off and All Sound Off.
		"""

		for note in list(self.active_notes):
			self._send(mido.Message('note_off', channel=self.channel, note=note, velocity=0))

		self.active_notes.clear()

		self._send(mido.Message('control_change', channel=self.channel, control=123, value=0))
		self._send(mido.Message('control_change', channel=self.channel, control=120, value=0))

		if self._bend != 0:
			self._send(mido.Message('pitchwheel', channel=self.channel, pitch=0))
			self._bend = 0


	def _send (self, message: mido.Message) -> None:

		"""
		Send a message to the port, logging rather than raising on failure.
		"""

		if self.midi_out is None:
			return

		try:
			self.midi_out.send(message)
		except Exception:
			logger.exception("MIDI send failed (device may be disconnected)")
