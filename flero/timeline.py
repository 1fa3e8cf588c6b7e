"""Beat/time mapping for the scheduler.

A ``BeatTimeline`` is an immutable linear mapping between beat numbers and
timestamps on the audio clock::

    time = reference_time + (beat - reference_beat) * 60 / beats_per_minute

The tempo is constant within one timeline.  Every change of anchor or tempo
produces a *new* timeline and the owner swaps its reference, so a timeline
never accumulates error from repeated in-place updates.  Loop wraps call
``shifted_by()``, which recomputes the anchor from the exact previous anchor
instead of adding a beat duration again and again.
"""

import dataclasses


class InvalidTempoError (ValueError):

	"""Raised when a timeline would be built with a non-positive tempo."""


@dataclasses.dataclass(frozen=True)
class BeatTimeline:

	"""
	An immutable mapping from beats to audio-clock timestamps and back.
	"""

	beats_per_minute: float
	reference_beat: float = 0
	reference_time: float = 0.0


	def __post_init__ (self) -> None:

		"""
		Reject tempos that would break the beat/time mapping.
		"""

		if not self.beats_per_minute > 0:
			raise InvalidTempoError(f"Tempo must be positive, got {self.beats_per_minute!r}")


	@property
	def seconds_per_beat (self) -> float:

		"""Duration of one beat in seconds."""

		return 60.0 / self.beats_per_minute


	def time_for (self, beat: float) -> float:

		"""
		Return the audio-clock timestamp at which ``beat`` falls.
		"""

		return self.reference_time + (beat - self.reference_beat) * 60.0 / self.beats_per_minute


	def beat_for (self, time: float) -> float:

		"""
		Return the beat that falls at the audio-clock timestamp ``time``.
		"""

		return self.reference_beat + (time - self.reference_time) * self.beats_per_minute / 60.0


	def shifted_by (self, beat_delay: float, time_delay: float = 0.0) -> "BeatTimeline":

		"""Return a timeline whose reference beat falls ``beat_delay`` beats later.

		The new reference time is computed from this timeline's own anchor, so the
		instant at ``reference_beat + beat_delay`` is preserved exactly (plus any
		``time_delay``).  Used at loop wraps to re-anchor without drift.

		Parameters:
			beat_delay: Number of beats to move the anchor forward in time.
			time_delay: Extra seconds added to the new reference time.
		"""

		return dataclasses.replace(
			self,
			reference_time = self.time_for(self.reference_beat + beat_delay) + time_delay
		)


	def restarted_at (self, reference_time: float, reference_beat: float = 0) -> "BeatTimeline":

		"""
		Return a timeline at the same tempo anchored at a fresh (time, beat) pair.
		"""

		return dataclasses.replace(self, reference_beat=reference_beat, reference_time=reference_time)


	def retempos_at (self, new_bpm: float, from_beat: float) -> "BeatTimeline":

		"""Return a timeline that changes tempo at ``from_beat``.

		``from_beat`` keeps the timestamp it has on *this* timeline; only beats after
		it move.  Raises ``InvalidTempoError`` if ``new_bpm`` is not positive.
		"""

		return BeatTimeline(
			beats_per_minute = new_bpm,
			reference_beat = from_beat,
			reference_time = self.time_for(from_beat)
		)
