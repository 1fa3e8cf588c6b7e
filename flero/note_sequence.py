"""Editable, ordered store of notes.

Notes are kept sorted by start beat.  When several notes share a start beat,
the most recently inserted one sits first: insertion happens before the first
existing note whose start is at or after the new note's start.  The same
position lookup bounds range queries, so insertion order and query boundaries
follow one rule.

A ``NoteSequence`` is shared between the scheduler, which only reads it, and
whatever editor mutates it.  Every mutation fires the ``"change"`` event.
"""

import bisect
import dataclasses
import logging
import typing

import flero.event_emitter


logger = logging.getLogger(__name__)


class InvalidNoteError (ValueError):

	"""Raised when a note with a negative start or a non-positive length is stored."""


@dataclasses.dataclass(eq=False)
class Note:

	"""
	A note in beats, identified by reference rather than by value.
	"""

	start: float		# beat the note starts on
	length: float		# duration in beats
	number: int			# pitch index, resolved by a frequency source


def create_note (start: float = 0, length: float = 1, number: int = 0) -> Note:

	"""
	Create a new note.
	"""

	return Note(start=start, length=length, number=number)


def _validate (start: float, length: float) -> None:

	"""
	Raise ``InvalidNoteError`` for values that would corrupt scheduling.
	"""

	if not start >= 0:
		raise InvalidNoteError(f"Note start cannot be negative, got {start!r}")

	if not length > 0:
		raise InvalidNoteError(f"Note length must be positive, got {length!r}")


class NoteSequence:

	"""
	An ordered sequence of notes supporting range queries and change listeners.
	"""

	def __init__ (self) -> None:

		"""
		Initialize an empty sequence.
		"""

		self._notes: typing.List[Note] = []
		self.events = flero.event_emitter.EventEmitter()


	def __len__ (self) -> int:

		return len(self._notes)


	def __iter__ (self) -> typing.Iterator[Note]:

		return iter(list(self._notes))


	def find_position (self, beat: float) -> int:

		"""
		Return the index of the first note starting at or after ``beat``.

		Returns the sequence length when every note starts before ``beat``.
		"""

		return bisect.bisect_left(self._notes, beat, key=lambda note: note.start)


	def add_note (self, note: Note) -> None:

		"""
		Insert a note ahead of any notes that share its start beat.
		"""

		_validate(note.start, note.length)

		self._notes.insert(self.find_position(note.start), note)

		logger.debug(f"Added note {note.number} at beat {note.start} ({len(self._notes)} notes)")

		self._notify()


	def remove_note (self, note: Note) -> None:

		"""
		Remove a note by identity.

		Removing a note that is not in the sequence does nothing, though listeners
		are still notified.
		"""

		self._discard(note)
		self._notify()


	def move_note (self, note: Note, new_start: float, new_pitch: int) -> None:

		"""Move a note to a new start beat and pitch.

		The note object is updated in place and reinserted at the position for
		``new_start``, ahead of any notes already starting there.  Listeners are
		notified once.  A note that is not in the sequence is left untouched.

		Parameters:
			note: The note to move (matched by identity).
			new_start: The beat the note should start on.
			new_pitch: The note's new pitch index.
		"""

		_validate(new_start, note.length)

		if self._discard(note):
			note.start = new_start
			note.number = new_pitch
			self._notes.insert(self.find_position(new_start), note)

		self._notify()


	def get_notes (self, start_beat: float, end_beat: float) -> typing.List[Note]:

		"""
		Return the notes with ``start_beat <= note.start < end_beat``, in sequence order.
		"""

		start_position = self.find_position(start_beat)
		end_position = self.find_position(end_beat)

		return self._notes[start_position:end_position]


	def add_change_listener (self, listener: typing.Callable[[], typing.Any]) -> typing.Callable[[], typing.Any]:

		"""
		Register a zero-argument callback fired after every mutation.

		Returns the listener so it can be passed to ``remove_change_listener()``.
		"""

		return self.events.on("change", listener)


	def remove_change_listener (self, listener: typing.Callable[[], typing.Any]) -> None:

		"""
		Unregister a change listener.  Raises ``ValueError`` if it was never added.
		"""

		self.events.off("change", listener)


	def _discard (self, note: Note) -> bool:

		"""
		Remove a note by identity without notifying.  Returns whether it was present.
		"""

		for index, existing in enumerate(self._notes):
			if existing is note:
				del self._notes[index]
				return True

		logger.debug(f"Note {note!r} not in sequence")

		return False


	def _notify (self) -> None:

		self.events.emit("change")


def create_empty_note_sequence () -> NoteSequence:

	"""
	Create a note sequence with no notes in it.
	"""

	return NoteSequence()
