import pytest

import flero.tuning


def test_equal_temperament_reference () -> None:

	"""Note number 0 is A4 at 440 Hz."""

	assert flero.tuning.EQUAL_TEMPERAMENT.frequency_of(0) == pytest.approx(440.0)


@pytest.mark.parametrize("note_number, expected", [
	(12, 880.0),
	(-12, 220.0),
	(3, 523.2511),
	(-9, 261.6256),
])
def test_equal_temperament_semitones (note_number: int, expected: float) -> None:

	"""Each note number is one equal-tempered semitone from its neighbours."""

	assert flero.tuning.EQUAL_TEMPERAMENT.frequency_of(note_number) == pytest.approx(expected, rel=1e-6)


def test_equal_temperament_custom_reference () -> None:

	"""A different reference pitch scales every frequency."""

	tuning = flero.tuning.EqualTemperament(reference_frequency=432.0)

	assert tuning.frequency_of(12) == pytest.approx(864.0)


def test_equal_temperament_rejects_bad_reference () -> None:

	"""A non-positive reference frequency is refused."""

	with pytest.raises(ValueError):
		flero.tuning.EqualTemperament(reference_frequency=0)


def test_octave_scale_degrees () -> None:

	"""Scale degrees index into the interval list and repeat each octave."""

	scale = flero.tuning.create_octave_scale([0, 2, 4, 7, 9])

	assert [scale.semitones_of(n) for n in range(7)] == [0, 2, 4, 7, 9, 12, 14]


def test_octave_scale_negative_degrees () -> None:

	"""Negative degrees count down through the octave below."""

	scale = flero.tuning.create_octave_scale([0, 2, 4, 7, 9])

	assert scale.semitones_of(-1) == -3
	assert scale.semitones_of(-5) == -12
	assert scale.semitones_of(-6) == -15


def test_octave_scale_octave_offset () -> None:

	"""An octave offset shifts every degree by twelve semitones."""

	scale = flero.tuning.create_octave_scale([0, 2, 4, 7, 9], octave=1)

	assert scale.frequency_of(0) == pytest.approx(880.0)


def test_octave_scale_by_name () -> None:

	"""Scales can be created from the named interval table."""

	scale = flero.tuning.create_octave_scale("major_pentatonic")

	assert scale.notes == [0, 2, 4, 7, 9]
	assert scale.frequency_of(5) == pytest.approx(880.0)


def test_unknown_scale_name_rejected () -> None:

	"""An unknown scale name raises ValueError."""

	with pytest.raises(ValueError, match="Unknown scale"):
		flero.tuning.create_octave_scale("not_a_scale")


def test_empty_scale_rejected () -> None:

	"""A scale must have at least one note."""

	with pytest.raises(ValueError):
		flero.tuning.create_octave_scale([])


def test_octave_scale_uses_its_tuning_system () -> None:

	"""The scale hands semitone numbers to whatever tuning system it was given."""

	class Semitones:

		def frequency_of (self, note_number: int) -> float:
			return float(note_number)

	scale = flero.tuning.create_octave_scale([0, 3, 7], tuning_system=Semitones())

	assert scale.frequency_of(4) == 15.0


def test_scales_are_frequency_sources () -> None:

	"""Both tuning classes satisfy the FrequencySource protocol."""

	assert isinstance(flero.tuning.EQUAL_TEMPERAMENT, flero.tuning.FrequencySource)
	assert isinstance(flero.tuning.create_octave_scale("chromatic"), flero.tuning.FrequencySource)
