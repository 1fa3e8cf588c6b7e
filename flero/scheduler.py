"""The lookahead scheduler that plays a note sequence.

Every ``schedule_interval_ms`` the scheduler asks its timeline which beat will
be reached ``lookahead_seconds`` from now, fetches the notes that start between
the last beat it covered and that beat, and hands each one to the audio output
with absolute start and stop timestamps.  Because the output plays tones at
those timestamps on its own clock, jitter in when the tick runs only changes
how early a note is queued, never when it sounds.

The timeline is never modified.  Loop wraps, resumes and tempo changes each
swap in a new ``BeatTimeline`` derived from the current one.

States are ``"stopped"`` (initial), ``"playing"`` and ``"paused"``:

    stopped --play--> playing --pause--> paused --play--> playing
       ^                 |                  |
       +------stop-------+-------stop-------+
"""

import asyncio
import logging
import typing

import flero.audio_output
import flero.constants
import flero.event_emitter
import flero.note_sequence
import flero.timeline
import flero.tuning


logger = logging.getLogger(__name__)


STOPPED = "stopped"
PLAYING = "playing"
PAUSED = "paused"


class Scheduler:

	"""
	Plays a shared, editable note sequence against an audio clock.
	"""

	def __init__ (
		self,
		frequency_source: flero.tuning.FrequencySource,
		audio_output: flero.audio_output.AudioOutput,
		note_sequence: flero.note_sequence.NoteSequence,
		tempo: float = flero.constants.DEFAULT_TEMPO,
		lookahead_seconds: float = flero.constants.LOOKAHEAD_SECONDS,
		schedule_interval_ms: float = flero.constants.SCHEDULE_INTERVAL_MS,
		loop_length: float = flero.constants.LOOP_LENGTH_BEATS,
		waveform: str = flero.constants.DEFAULT_WAVEFORM
	) -> None:

		"""Initialize a stopped scheduler.

		Parameters:
			frequency_source: Converts note numbers to frequencies (e.g. an
				``OctaveScale``).
			audio_output: Clock and tone sink; see ``flero.audio_output.AudioOutput``.
			note_sequence: The notes to play.  Shared, not copied - edits made while
				playing are picked up on the next tick.
			tempo: Initial tempo in BPM.  Raises ``InvalidTempoError`` if not positive.
			lookahead_seconds: How far ahead of the audio clock each tick schedules.
			schedule_interval_ms: Time between ticks while playing.
			loop_length: Beats after which playback wraps to beat 0.
			waveform: Waveform name passed to the audio output for every tone.
		"""

		if not lookahead_seconds >= 0:
			raise ValueError("Lookahead cannot be negative")

		if not schedule_interval_ms > 0:
			raise ValueError("Schedule interval must be positive")

		if not loop_length > 0:
			raise ValueError("Loop length must be positive")

		if waveform not in flero.constants.WAVEFORM_PROGRAMS:
			raise ValueError(f"Unknown waveform {waveform!r}. Available: {sorted(flero.constants.WAVEFORM_PROGRAMS)}")

		self.frequency_source = frequency_source
		self.audio_output = audio_output
		self.note_sequence = note_sequence
		self.lookahead_seconds = lookahead_seconds
		self.schedule_interval_ms = schedule_interval_ms
		self.loop_length = loop_length
		self.waveform = waveform

		self.timeline = flero.timeline.BeatTimeline(
			beats_per_minute = tempo,
			reference_beat = 0,
			reference_time = audio_output.current_time
		)

		self.state: str = STOPPED
		self.beat_number: float = 0
		self.resume_beat: float = 0
		self.task: typing.Optional[asyncio.Task] = None
		self.events = flero.event_emitter.EventEmitter()


	@property
	def tempo (self) -> float:

		"""Current tempo in BPM."""

		return self.timeline.beats_per_minute


	def on_event (self, event_name: str, callback: typing.Callable[..., typing.Any]) -> None:

		"""
		Register a callback for ``"play"``, ``"pause"``, ``"stop"``, ``"tempo"`` or ``"loop"``.
		"""

		self.events.on(event_name, callback)


	def play (self, delay: float = 0) -> None:

		"""
		Start or resume playback after ``delay`` seconds.

		Playback resumes from the beat captured by the last ``pause()``, or from
		beat 0 after ``stop()``.  Does nothing if already playing.

		``delay`` (like the delays of ``pause()`` and ``stop()``) is timed by the
		asyncio event loop clock, not by the audio output's clock.  Once playback
		starts, every note is placed on the audio clock.  Must be called from
		inside a running event loop.
		"""

		if self.state == PLAYING:
			return

		self._defer(delay, self._start)


	def pause (self, delay: float = 0) -> None:

		"""
		Pause playback after ``delay`` seconds.  Does nothing unless playing.
		"""

		if self.state != PLAYING:
			return

		self._defer(delay, self._pause)


	def stop (self, delay: float = 0) -> None:

		"""
		Stop playback after ``delay`` seconds and rewind to beat 0.
		"""

		self._defer(delay, self._stop)


	def change_tempo (self, new_bpm: float) -> None:

		"""Change the tempo from the next beat that has not been scheduled yet.

		Notes that are already queued keep their timestamps.  Raises
		``InvalidTempoError`` (leaving the current tempo in place) if ``new_bpm``
		is not positive.
		"""

		self.timeline = self.timeline.retempos_at(new_bpm, self.beat_number)

		logger.info(f"Tempo set to {new_bpm:.2f} BPM from beat {self.beat_number:.3f}")

		self.events.emit("tempo", new_bpm)


	def schedule_notes (self) -> None:

		"""Run one scheduling tick.

		Schedules every note that starts between ``beat_number`` and the beat
		reached ``lookahead_seconds`` from now, then advances ``beat_number`` to
		that beat.  When the window crosses ``loop_length`` the rest of the loop is
		scheduled first, the timeline is shifted by one loop, and the remainder of
		the window is scheduled from beat 0.
		"""

		window_end = self.timeline.beat_for(self.audio_output.current_time + self.lookahead_seconds)

		if window_end <= self.beat_number:
			return

		while window_end >= self.loop_length:

			self._schedule_window(self.beat_number, self.loop_length)

			window_end -= self.loop_length
			self.beat_number = 0
			self.timeline = self.timeline.shifted_by(self.loop_length)

			logger.debug(f"Loop wrapped, beat 0 now at {self.timeline.time_for(0):.4f}")

			self.events.emit("loop", self.timeline)

		self._schedule_window(self.beat_number, window_end)
		self.beat_number = window_end


	def _schedule_window (self, start_beat: float, end_beat: float) -> None:

		"""
		Hand every note starting in ``[start_beat, end_beat)`` to the audio output.
		"""

		notes = self.note_sequence.get_notes(start_beat, end_beat)

		for note in notes:

			start_time = self.timeline.time_for(note.start)
			stop_time = self.timeline.time_for(note.start + note.length)

			self.audio_output.schedule_tone(
				self.waveform,
				self.frequency_source.frequency_of(note.number),
				start_time,
				stop_time
			)

		if notes:
			logger.debug(f"Scheduled {len(notes)} notes in beats [{start_beat:.3f}, {end_beat:.3f})")


	def _defer (self, delay: float, action: typing.Callable[[], None]) -> None:

		"""
		Run ``action`` now, or after ``delay`` seconds on the running event loop.
		"""

		if not delay > 0:
			action()
			return

		asyncio.get_running_loop().call_later(delay, action)


	def _start (self) -> None:

		if self.state == PLAYING:
			return

		# Raises RuntimeError outside an event loop, before any state changes.
		loop = asyncio.get_running_loop()

		resume_beat = self.resume_beat if self.state == PAUSED else 0

		self.timeline = self.timeline.restarted_at(self.audio_output.current_time, resume_beat)
		self.beat_number = resume_beat
		self.state = PLAYING
		self.task = loop.create_task(self._run_loop())

		logger.info(f"Playing from beat {resume_beat:.3f} at {self.tempo:.2f} BPM")

		self.events.emit("play", resume_beat)


	def _pause (self) -> None:

		if self.state != PLAYING:
			return

		if self.task:
			self.task.cancel()
			self.task = None

		now = self.audio_output.current_time

		# Just after a wrap the clock can still be in the previous loop.
		self.resume_beat = self.timeline.beat_for(now) % self.loop_length
		self.audio_output.cancel_scheduled(now)
		self.state = PAUSED

		logger.info(f"Paused at beat {self.resume_beat:.3f}")

		self.events.emit("pause", self.resume_beat)


	def _stop (self) -> None:

		if self.state == PLAYING:
			self._pause()

		self.resume_beat = 0
		self.beat_number = 0
		self.state = STOPPED

		logger.info("Stopped")

		self.events.emit("stop")


	async def _run_loop (self) -> None:

		"""
		Tick immediately, then every ``schedule_interval_ms`` until cancelled.

		A tick that raises is logged and pauses playback, so a later ``play()``
		can start a fresh loop.
		"""

		interval = self.schedule_interval_ms / 1000.0

		while self.state == PLAYING:

			try:
				self.schedule_notes()
			except Exception:
				logger.exception("Scheduling tick failed - pausing playback")
				self.task = None
				self._pause()
				return

			await asyncio.sleep(interval)


def create_sequencer (
	scale: flero.tuning.FrequencySource,
	tempo: float,
	audio_output: flero.audio_output.AudioOutput,
	note_sequence: typing.Optional[flero.note_sequence.NoteSequence] = None,
	**options: typing.Any
) -> Scheduler:

	"""Create a stopped scheduler.

	Parameters:
		scale: Frequency source for note numbers.
		tempo: Initial tempo in BPM.
		audio_output: Clock and tone sink.
		note_sequence: Notes to play; an empty sequence is created when omitted.
		options: Passed on to ``Scheduler`` (``lookahead_seconds``,
			``schedule_interval_ms``, ``loop_length``, ``waveform``).

	Example:
		```python
		scale = flero.tuning.create_octave_scale("major_pentatonic")
		sequencer = flero.scheduler.create_sequencer(scale=scale, tempo=144, audio_output=output)
		sequencer.note_sequence.add_note(flero.note_sequence.create_note(start=0, length=1, number=2))
		sequencer.play()
		```
	"""

	if note_sequence is None:
		note_sequence = flero.note_sequence.create_empty_note_sequence()

	return Scheduler(
		frequency_source = scale,
		audio_output = audio_output,
		note_sequence = note_sequence,
		tempo = tempo,
		**options
	)
