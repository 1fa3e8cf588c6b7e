"""Frequency sources: map note numbers to frequencies in Hz.

Note numbers count semitones from A4, which is note number 0 (so A3 is -12
and B4 is 2).  ``EqualTemperament`` converts those numbers directly.  An
``OctaveScale`` indexes into a list of scale intervals instead, repeating the
list every octave, and hands the resulting semitone number to a tuning system.

    scale = flero.tuning.create_octave_scale(scale_notes="major_pentatonic")
    scale.frequency_of(0)   # 440.0 (A4)
    scale.frequency_of(5)   # 880.0 (A5, one octave of five notes up)
"""

import typing

import flero.constants


SCALE_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"chromatic": [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11],
	"major_ionian": [0, 2, 4, 5, 7, 9, 11],
	"natural_minor": [0, 2, 3, 5, 7, 8, 10],
	"harmonic_minor": [0, 2, 3, 5, 7, 8, 11],
	"dorian_mode": [0, 2, 3, 5, 7, 9, 10],
	"mixolydian": [0, 2, 4, 5, 7, 9, 10],
	"major_pentatonic": [0, 2, 4, 7, 9],
	"minor_pentatonic": [0, 3, 5, 7, 10],
	"blues_scale": [0, 3, 5, 6, 7, 10],
	"whole_tone": [0, 2, 4, 6, 8, 10],
}


@typing.runtime_checkable
class FrequencySource (typing.Protocol):

	"""
	Anything that can turn a note number into a frequency.
	"""

	def frequency_of (self, note_number: int) -> float:

		...


class EqualTemperament:

	"""
	Twelve-tone equal temperament relative to a reference frequency for A4.
	"""

	def __init__ (self, reference_frequency: float = flero.constants.REFERENCE_FREQUENCY) -> None:

		if not reference_frequency > 0:
			raise ValueError("Reference frequency must be positive")

		self.reference_frequency = reference_frequency


	def frequency_of (self, note_number: int) -> float:

		"""
		Return the frequency of a note ``note_number`` semitones from A4.
		"""

		return self.reference_frequency * 2 ** (note_number / 12)


EQUAL_TEMPERAMENT = EqualTemperament()


class OctaveScale:

	"""
	A scale whose notes repeat every octave.
	"""

	def __init__ (self, scale_notes: typing.Sequence[int], tuning_system: FrequencySource = EQUAL_TEMPERAMENT, octave: int = 0) -> None:

		"""Create an octave scale.

		Parameters:
			scale_notes: Semitone offsets of the scale degrees within one octave.
			tuning_system: Converts semitone numbers (0 = A4) to frequencies.
			octave: Octave offset; 1 shifts every note up an octave.
		"""

		if not scale_notes:
			raise ValueError("An octave scale needs at least one note")

		self.notes = list(scale_notes)
		self.tuning_system = tuning_system
		self.octave = octave


	def semitones_of (self, note_number: int) -> int:

		"""
		Return the semitone number (0 = A4) for a scale degree.

		Negative note numbers count down through lower octaves, so -1 is the top
		degree of the octave below.
		"""

		octaves, degree = divmod(note_number, len(self.notes))

		return (octaves + self.octave) * 12 + self.notes[degree]


	def frequency_of (self, note_number: int) -> float:

		"""
		Return the frequency of a scale degree.
		"""

		return self.tuning_system.frequency_of(self.semitones_of(note_number))


def create_octave_scale (
	scale_notes: typing.Union[str, typing.Sequence[int]],
	tuning_system: FrequencySource = EQUAL_TEMPERAMENT,
	octave: int = 0
) -> OctaveScale:

	"""Create a new octave scale.

	Parameters:
		scale_notes: Semitone offsets within the octave, or the name of a scale in
			``SCALE_INTERVALS`` (e.g. ``"major_pentatonic"``).
		tuning_system: Mapping of semitone numbers to frequencies. Defaults to
			twelve-tone equal temperament with A4 at 440 Hz.
		octave: Octave offset - a value of 1 shifts all notes up an octave.
	"""

	if isinstance(scale_notes, str):

		if scale_notes not in SCALE_INTERVALS:
			raise ValueError(f"Unknown scale: {scale_notes!r}. Available: {sorted(SCALE_INTERVALS)}")

		scale_notes = SCALE_INTERVALS[scale_notes]

	return OctaveScale(scale_notes, tuning_system=tuning_system, octave=octave)
