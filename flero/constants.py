"""Playback defaults.

- `DEFAULT_TEMPO = 144` - beats per minute
- `SCHEDULE_INTERVAL_MS = 25` - how often the scheduler wakes up
- `LOOKAHEAD_SECONDS = 0.1` - how far ahead of the audio clock notes are queued
- `LOOP_LENGTH_BEATS = 8` - beats after which playback wraps to the start

The lookahead must be comfortably longer than the schedule interval, otherwise
a late wake-up leaves a gap that no tick covers.
"""

DEFAULT_TEMPO = 144
SCHEDULE_INTERVAL_MS = 25
LOOKAHEAD_SECONDS = 0.1
LOOP_LENGTH_BEATS = 8

DEFAULT_WAVEFORM = "sine"
OUTPUT_GAIN = 0.25

# General MIDI programs (0-based) standing in for oscillator waveforms.
WAVEFORM_PROGRAMS = {
	"sine": 79,			# Ocarina
	"square": 80,		# Lead 1 (square)
	"sawtooth": 81,		# Lead 2 (sawtooth)
	"triangle": 73,		# Flute
}

# MIDI note number of A4 (note number 0 in a tuning system).
MIDI_A4 = 69

# Pitch bend range assumed on the receiving synth, in semitones either way.
PITCH_BEND_RANGE = 2

# Frequency of A4 in Hz.
REFERENCE_FREQUENCY = 440.0
